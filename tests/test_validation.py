import numpy as np
import pandas as pd
import pytest

from wle_ml.common.errors import SchemaMismatch
from wle_ml.dataio import readers
from wle_ml.dataio.readers import load_dataset
from wle_ml.domain.exercise import LABEL_COLUMN, SENSOR_COLUMNS, SUBJECT_COLUMN, SUMMARY_PREFIXES
from wle_ml.preprocessing.reducer import feature_columns, reduce_columns
from wle_ml.validation.quality import check_data_quality, sparse_columns
from wle_ml.validation.schema import validate_dataframe_schema


def test_validate_schema_success():
    df = pd.DataFrame({"a": [1, 2], "b": [3, 4]})
    assert validate_dataframe_schema(df, ["a", "b"]) is True


def test_validate_schema_missing_columns():
    df = pd.DataFrame({"a": [1, 2]})
    with pytest.raises(SchemaMismatch, match="Missing required columns") as exc:
        validate_dataframe_schema(df, ["a", "b", "c"])
    assert exc.value.missing == ["b", "c"]


def test_check_data_quality():
    df = pd.DataFrame({"a": [1, 2, None, 4], "b": [5, 5, 5, 5]})
    report = check_data_quality(df)
    assert report["total_rows"] == 4
    assert report["missing_values"]["a"] == 1
    assert report["missing_fraction"]["a"] == 0.25
    assert report["constant_columns"] == ["b"]


def test_sparse_columns(raw_frame):
    assert sparse_columns(raw_frame) == ["kurtosis_roll_belt"]


def test_sensor_columns_are_dense_measurements():
    assert len(SENSOR_COLUMNS) == 52
    assert len(set(SENSOR_COLUMNS)) == 52
    assert not any(col.startswith(SUMMARY_PREFIXES) for col in SENSOR_COLUMNS)


def test_reduce_columns_keeps_documented_subset(raw_frame):
    reduced = reduce_columns(raw_frame)
    assert list(reduced.columns) == [SUBJECT_COLUMN, LABEL_COLUMN] + SENSOR_COLUMNS
    assert len(reduced) == len(raw_frame)
    assert feature_columns(reduced) == SENSOR_COLUMNS
    # The input is left untouched.
    assert "num_window" in raw_frame.columns


def test_reduce_columns_missing_sensor(raw_frame):
    with pytest.raises(SchemaMismatch) as exc:
        reduce_columns(raw_frame.drop(columns=["yaw_arm", "magnet_forearm_z"]))
    assert exc.value.missing == ["magnet_forearm_z", "yaw_arm"]


def test_reduce_columns_unlabeled(raw_frame):
    unlabeled = raw_frame.drop(columns=[LABEL_COLUMN])
    with pytest.raises(SchemaMismatch):
        reduce_columns(unlabeled)
    reduced = reduce_columns(unlabeled, require_label=False)
    assert list(reduced.columns) == [SUBJECT_COLUMN] + SENSOR_COLUMNS


def test_load_dataset_from_local_csv(tmp_path, raw_frame):
    path = tmp_path / "sample.csv"
    raw_frame.to_csv(path, index=False)
    first = load_dataset(str(path), tmp_path)
    second = load_dataset(str(path), tmp_path)
    pd.testing.assert_frame_equal(first, second)
    assert np.isnan(first["kurtosis_roll_belt"].iloc[1])


def test_load_dataset_unknown_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_dataset("no-such-source", tmp_path)


def test_load_dataset_caches_registered_source(tmp_path, raw_frame, monkeypatch):
    upstream = tmp_path / "upstream.csv"
    raw_frame.to_csv(upstream, index=False)
    monkeypatch.setitem(readers.SOURCES, "demo", upstream.as_uri())
    cache_dir = tmp_path / "cache"

    first = load_dataset("demo", cache_dir)
    assert (cache_dir / "demo.csv").exists()
    second = load_dataset("demo", cache_dir)
    pd.testing.assert_frame_equal(first, second)
    assert len(first) == len(raw_frame)

    raw_frame.head(5).to_csv(upstream, index=False)
    assert len(load_dataset("demo", cache_dir)) == len(raw_frame)
    assert len(load_dataset("demo", cache_dir, refresh=True)) == 5
    assert len(load_dataset("demo", cache_dir)) == 5
