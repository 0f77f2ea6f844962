from dataclasses import dataclass

from sklearn.model_selection import RepeatedStratifiedKFold


@dataclass(frozen=True)
class CVConfig:
    method: str = "repeatedcv"
    folds: int = 10
    repeats: int = 3
    random_state: int | None = 42

    def __post_init__(self):
        if self.method != "repeatedcv":
            raise ValueError(f"Unsupported resampling method: {self.method}")
        if self.folds < 2:
            raise ValueError("folds must be at least 2")
        if self.repeats < 1:
            raise ValueError("repeats must be at least 1")

    @classmethod
    def from_settings(cls, settings) -> "CVConfig":
        return cls(folds=settings.cv_folds, repeats=settings.cv_repeats, random_state=settings.model_seed)


def make_cv(config: CVConfig) -> RepeatedStratifiedKFold:
    """Repeated k-fold, stratified on the outcome so every fold sees every class."""
    return RepeatedStratifiedKFold(
        n_splits=config.folds, n_repeats=config.repeats, random_state=config.random_state
    )
