import logging

import pandas as pd

from wle_ml.domain.exercise import LABEL_COLUMN, SENSOR_COLUMNS, SUBJECT_COLUMN
from wle_ml.validation.quality import check_data_quality, sparse_columns
from wle_ml.validation.schema import validate_dataframe_schema

logger = logging.getLogger(__name__)


def reduce_columns(
    df: pd.DataFrame, sensor_columns: list[str] | None = None, require_label: bool = True
) -> pd.DataFrame:
    """Keep the subject, the label and the dense instantaneous sensor readings.

    Args:
        df: Raw dataset with the full sensor schema.
        sensor_columns: Numeric columns to keep, defaults to ``SENSOR_COLUMNS``.
        require_label: Unlabeled scoring data may omit the label column.

    Returns:
        A new DataFrame with columns ``[subject, label, *sensor_columns]``.

    Raises:
        SchemaMismatch: If any expected column is absent.
    """
    sensor_columns = list(SENSOR_COLUMNS if sensor_columns is None else sensor_columns)
    keep = [SUBJECT_COLUMN]
    if require_label or LABEL_COLUMN in df.columns:
        keep.append(LABEL_COLUMN)
    validate_dataframe_schema(df, keep + sensor_columns)

    sparse = [col for col in sparse_columns(df) if col not in sensor_columns]
    if sparse:
        logger.info(f"Dropping {len(sparse)} mostly-empty columns such as {sparse[:3]}")

    reduced = df[keep + sensor_columns].copy()
    reduced[sensor_columns] = reduced[sensor_columns].apply(pd.to_numeric, errors="coerce")

    quality = check_data_quality(reduced[sensor_columns])
    incomplete = {col: n for col, n in quality["missing_values"].items() if n}
    if incomplete:
        logger.warning(f"Reduced dataset still has missing values: {incomplete}")
    logger.info(
        f"Reduced {df.shape[1]} columns to {len(sensor_columns)} sensor features over {len(reduced)} rows"
    )
    return reduced


def feature_columns(df: pd.DataFrame) -> list[str]:
    return [col for col in df.columns if col not in (SUBJECT_COLUMN, LABEL_COLUMN)]
