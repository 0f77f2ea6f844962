import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

SOURCES = {
    "pml-training": "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-training.csv",
    "pml-testing": "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-testing.csv",
}

NA_VALUES = ["NA", "", "#DIV/0!"]


def read_raw_sensor(file_path: str | Path) -> pd.DataFrame:
    return pd.read_csv(file_path, na_values=NA_VALUES, keep_default_na=True, low_memory=False)


def resolve_source(source_name: str, cache_dir: str | Path) -> tuple[str | None, Path]:
    """Return ``(remote_url, local_path)`` for a registered name or a local CSV path."""
    if source_name in SOURCES:
        return SOURCES[source_name], Path(cache_dir) / f"{source_name}.csv"
    return None, Path(source_name)


def load_dataset(source_name: str, cache_dir: str | Path = "data/raw", refresh: bool = False) -> pd.DataFrame:
    """Load a raw dataset, fetching and caching registered remote sources once.

    Remote sources are cached once as strings, so repeated calls with the same
    ``source_name`` return identical frames until ``refresh=True``.
    """
    url, path = resolve_source(source_name, cache_dir)
    if url is not None and (refresh or not path.exists()):
        logger.info(f"Fetching {source_name} from {url}")
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = pd.read_csv(url, dtype=str, keep_default_na=False)
        raw.to_csv(path, index=False)
    elif url is None and not path.exists():
        raise FileNotFoundError(f"Unknown source '{source_name}': not registered and no such file")

    df = read_raw_sensor(path)
    if "Unnamed: 0" in df.columns:
        df = df.rename(columns={"Unnamed: 0": "X"})
    logger.info(f"Loaded {source_name}: {df.shape[0]} rows x {df.shape[1]} columns")
    return df
