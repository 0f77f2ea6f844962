import pandas as pd

from wle_ml.common.errors import SchemaMismatch


def validate_dataframe_schema(df: pd.DataFrame, required_columns: list[str]) -> bool:
    missing = set(required_columns) - set(df.columns)
    if missing:
        raise SchemaMismatch(missing)
    return True
