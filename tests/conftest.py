import numpy as np
import pandas as pd
import pytest

from wle_ml.common.config import PipelineSettings
from wle_ml.domain.exercise import CLASS_LABELS, LABEL_COLUMN, SENSOR_COLUMNS, SUBJECT_COLUMN

SUBJECTS = ["adelmo", "carlitos", "charles", "eurico", "jeremy", "pedro"]


def make_sensor_frame(subjects=SUBJECTS, rows_per_class: int = 20, seed: int = 0) -> pd.DataFrame:
    """Balanced synthetic readings whose means shift with the exercise class."""
    rng = np.random.default_rng(seed)
    class_means = {label: rng.normal(0, 3, len(SENSOR_COLUMNS)) for label in CLASS_LABELS}
    frames = []
    for subject in subjects:
        subject_shift = rng.normal(0, 0.5, len(SENSOR_COLUMNS))
        for label in CLASS_LABELS:
            values = class_means[label] + subject_shift + rng.normal(0, 1, (rows_per_class, len(SENSOR_COLUMNS)))
            frame = pd.DataFrame(values, columns=SENSOR_COLUMNS)
            frame.insert(0, LABEL_COLUMN, label)
            frame.insert(0, SUBJECT_COLUMN, subject)
            frames.append(frame)
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def sensor_frame():
    return make_sensor_frame()


@pytest.fixture
def raw_frame(sensor_frame):
    raw = sensor_frame.copy()
    raw.insert(0, "X", np.arange(1, len(raw) + 1))
    raw["raw_timestamp_part_1"] = 1323084231 + np.arange(len(raw))
    raw["new_window"] = "no"
    raw["num_window"] = np.arange(len(raw)) // 10
    raw["kurtosis_roll_belt"] = np.nan
    raw.loc[raw.index[::50], "kurtosis_roll_belt"] = 1.5
    return raw


@pytest.fixture
def fast_settings(tmp_path):
    return PipelineSettings(
        cv_folds=2,
        cv_repeats=1,
        n_estimators_grid=[5],
        concurrency=1,
        cv_jobs=1,
        cache_dir=tmp_path / "raw",
        output_dir=tmp_path / "reports",
        model_dir=tmp_path / "models",
    )
