import logging
import time
from dataclasses import dataclass

import pandas as pd

from wle_ml.evaluation.cross_validator import CVConfig
from wle_ml.features.base import FeatureStrategy
from wle_ml.models.bagging import BaggedTreesClassifier

logger = logging.getLogger(__name__)

WALL, CPU = "wall", "cpu"


@dataclass
class FittedModel:
    """A trained candidate: fitted feature transform, fitted classifier and provenance."""

    strategy_name: str
    strategy: FeatureStrategy
    estimator: BaggedTreesClassifier
    wall_seconds: float
    cpu_seconds: float
    timing_basis: str = WALL

    @property
    def training_seconds(self) -> float:
        return self.cpu_seconds if self.timing_basis == CPU else self.wall_seconds

    @property
    def cv_error(self) -> float:
        return self.estimator.cv_error_

    @property
    def n_features(self) -> int:
        return len(self.strategy.output_columns)

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        return self.strategy.apply(X)

    def predict(self, X: pd.DataFrame):
        """Predict from raw feature columns, applying the fitted transform first."""
        return self.estimator.predict(self.transform(X))


class ModelTrainer:
    def __init__(
        self,
        cv_config: CVConfig | None = None,
        n_estimators_grid=(25,),
        random_state: int = 42,
        n_jobs: int | None = None,
        timing_basis: str = WALL,
    ):
        if timing_basis not in (WALL, CPU):
            raise ValueError(f"Unknown timing basis: {timing_basis}")
        self.cv_config = cv_config or CVConfig()
        self.n_estimators_grid = list(n_estimators_grid)
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.timing_basis = timing_basis

    @classmethod
    def from_settings(cls, settings, n_jobs: int | None = None, timing_basis: str = WALL) -> "ModelTrainer":
        return cls(
            cv_config=CVConfig.from_settings(settings),
            n_estimators_grid=settings.n_estimators_grid,
            random_state=settings.model_seed,
            n_jobs=n_jobs,
            timing_basis=timing_basis,
        )

    def train(self, strategy: FeatureStrategy, X: pd.DataFrame, y) -> FittedModel:
        """Fit ``strategy`` on the training matrix, then the classifier on its output.

        Only the classifier fit is timed; the feature transform is learned
        before the clock starts.
        """
        strategy.fit(X, y)
        features = strategy.apply(X)
        estimator = BaggedTreesClassifier(
            cv_config=self.cv_config,
            n_estimators_grid=self.n_estimators_grid,
            random_state=self.random_state,
            n_jobs=self.n_jobs,
        )

        wall_start, cpu_start = time.perf_counter(), time.process_time()
        estimator.fit(features, y)
        wall_seconds = time.perf_counter() - wall_start
        cpu_seconds = time.process_time() - cpu_start

        logger.info(
            f"[{strategy.name}] trained on {features.shape[1]} features in "
            f"{wall_seconds:.2f}s wall / {cpu_seconds:.2f}s cpu"
        )
        return FittedModel(
            strategy_name=strategy.name,
            strategy=strategy,
            estimator=estimator,
            wall_seconds=wall_seconds,
            cpu_seconds=cpu_seconds,
            timing_basis=self.timing_basis,
        )
