from abc import ABC, abstractmethod

import numpy as np
import pandas as pd
from sklearn.exceptions import NotFittedError

from wle_ml.common.errors import DegenerateInput, SchemaMismatch


def check_training_matrix(X: pd.DataFrame) -> None:
    n_rows, n_cols = X.shape
    if n_cols < 2:
        raise DegenerateInput(f"Training matrix needs at least 2 columns, got {n_cols}")
    if n_rows < n_cols:
        raise DegenerateInput(f"Training matrix has fewer rows ({n_rows}) than columns ({n_cols})")
    if X.isnull().to_numpy().any():
        raise DegenerateInput("Training matrix contains missing values")


class FeatureStrategy(ABC):
    """Learns a feature transform on training data and replays it elsewhere.

    ``fit`` is the only place parameters are estimated. ``apply`` reads the
    fitted parameters and never updates them, so validation and test
    matrices go through exactly the transform learned on training rows.
    """

    name = "base"

    def fit(self, X: pd.DataFrame, y=None) -> "FeatureStrategy":
        check_training_matrix(X)
        self.input_columns_ = list(X.columns)
        self._fit(X, y)
        return self

    def apply(self, X: pd.DataFrame) -> pd.DataFrame:
        if not self.is_fitted:
            raise NotFittedError(f"{type(self).__name__} must be fit before apply")
        missing = set(self.input_columns_) - set(X.columns)
        if missing:
            raise SchemaMismatch(missing)
        return self._apply(X[self.input_columns_])

    @property
    def is_fitted(self) -> bool:
        return hasattr(self, "input_columns_")

    @property
    def fitted_params(self) -> dict:
        """Copy of every learned parameter, for provenance and auditing."""
        if not self.is_fitted:
            return {}
        params = {"input_columns": list(self.input_columns_)}
        params.update({k: np.array(v, copy=True) if isinstance(v, np.ndarray) else v for k, v in self._params().items()})
        return params

    @property
    def output_columns(self) -> list[str]:
        return list(self._params().get("columns", self.input_columns_))

    @abstractmethod
    def _fit(self, X: pd.DataFrame, y) -> None:
        pass

    @abstractmethod
    def _apply(self, X: pd.DataFrame) -> pd.DataFrame:
        pass

    @abstractmethod
    def _params(self) -> dict:
        pass

    def __repr__(self):
        return f"{type(self).__name__}()"


class IdentityStrategy(FeatureStrategy):
    """Pass the features through; scaling is left to the trainer."""

    name = "identity"

    def _fit(self, X, y):
        pass

    def _apply(self, X):
        return X.copy()

    def _params(self):
        return {"columns": list(self.input_columns_)}


class ColumnSubsetStrategy(FeatureStrategy):
    """Base for strategies whose transform is a fixed column selection."""

    def _apply(self, X):
        return X[self.selected_columns_].copy()

    def _params(self):
        return {"columns": list(self.selected_columns_)}
