import os
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def load_config(config_path: str | Path) -> dict:
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class PipelineSettings(BaseSettings):
    """Run configuration for the strategy comparison pipeline.

    Values come from (highest priority first) explicit keyword arguments or a
    YAML file passed to ``from_yaml``, then ``WLE_``-prefixed environment
    variables, then the defaults below.
    """

    # Data
    source_name: str = "pml-training"
    cache_dir: Path = Path("data/raw")
    output_dir: Path = Path("artifacts/reports")
    model_dir: Path = Path("artifacts/models")

    # Subject partitioning
    split_seed_train: int = 3903
    split_seed_test: int = 5285
    n_train_subjects: int = Field(4, ge=1)

    # Cross-validation
    cv_folds: int = Field(10, ge=2)
    cv_repeats: int = Field(3, ge=1)

    # Feature strategies
    pca_variance_threshold: float = Field(0.5, gt=0.0, le=1.0)
    correlation_cutoff: float = Field(0.6, gt=0.0, le=1.0)
    cfs_max_backtracks: int = Field(5, ge=1)

    # Classifier
    n_estimators_grid: list[int] = [25]
    model_seed: int = 42

    # Selection
    selection_tolerance: float = Field(0.0, ge=0.0, le=1.0)

    # Execution: strategy pipelines run side by side when concurrency > 1,
    # otherwise the CV fold fits inside each pipeline use cv_jobs workers.
    concurrency: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    cv_jobs: int = -1
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="WLE_")

    @field_validator("n_estimators_grid")
    @classmethod
    def _check_grid(cls, value: list[int]) -> list[int]:
        if not value or any(n < 1 for n in value):
            raise ValueError("n_estimators_grid needs at least one positive ensemble size")
        return value

    @classmethod
    def from_yaml(cls, config_path: str | Path | None = None, **overrides) -> "PipelineSettings":
        values = load_config(config_path) if config_path else {}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
