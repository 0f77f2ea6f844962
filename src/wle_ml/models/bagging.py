import logging

import numpy as np
from sklearn.ensemble import BaggingClassifier
from sklearn.exceptions import NotFittedError
from sklearn.model_selection import GridSearchCV
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeClassifier

from wle_ml.evaluation.cross_validator import CVConfig, make_cv
from wle_ml.models.base import BaseModel

logger = logging.getLogger(__name__)


class BaggedTreesClassifier(BaseModel):
    """Bagged decision trees behind a standard scaler, tuned by repeated CV.

    The scaler sits inside the resampled pipeline, so centering and scaling
    parameters are estimated from each CV training fold and, for the final
    refit, from the full training matrix.
    """

    def __init__(
        self,
        cv_config: CVConfig | None = None,
        n_estimators_grid=(25,),
        random_state: int = 42,
        n_jobs: int | None = None,
    ):
        self.cv_config = cv_config or CVConfig()
        self.n_estimators_grid = list(n_estimators_grid)
        self.random_state = random_state
        self.n_jobs = n_jobs

    def _pipeline(self) -> Pipeline:
        bagger = BaggingClassifier(estimator=DecisionTreeClassifier(), random_state=self.random_state)
        return Pipeline([("scale", StandardScaler()), ("bag", bagger)])

    def fit(self, X, y):
        search = GridSearchCV(
            self._pipeline(),
            param_grid={"bag__n_estimators": self.n_estimators_grid},
            cv=make_cv(self.cv_config),
            scoring="accuracy",
            n_jobs=self.n_jobs,
            refit=True,
        )
        search.fit(X, y)
        self.search_ = search
        self.classes_ = search.classes_
        self.cv_error_ = float(1.0 - search.best_score_)
        self.best_params_ = dict(search.best_params_)
        logger.info(
            f"Resampled error {self.cv_error_:.4f} with {self.best_params_} "
            f"({self.cv_config.folds}-fold x {self.cv_config.repeats})"
        )
        return self

    def predict(self, X) -> np.ndarray:
        if not hasattr(self, "search_"):
            raise NotFittedError("BaggedTreesClassifier must be fit before predict")
        return self.search_.predict(X)
