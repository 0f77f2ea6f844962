import logging

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from wle_ml.common.errors import DegenerateInput
from wle_ml.features.base import FeatureStrategy

logger = logging.getLogger(__name__)


def components_for_variance(explained_variance_ratio, threshold: float) -> int:
    """Smallest number of leading components whose cumulative ratio reaches ``threshold``."""
    cumulative = np.cumsum(explained_variance_ratio)
    # Tolerance keeps threshold=1.0 reachable despite rounding in the sum.
    n = int(np.searchsorted(cumulative, threshold - 1e-9, side="left")) + 1
    return min(n, len(cumulative))


class VarianceProjectionStrategy(FeatureStrategy):
    """Principal components of the standardized training features.

    Keeps the leading components that together explain at least
    ``variance_threshold`` of the training variance.
    """

    name = "pca"

    def __init__(self, variance_threshold: float = 0.5):
        if not 0.0 < variance_threshold <= 1.0:
            raise ValueError(f"variance_threshold must be in (0, 1], got {variance_threshold}")
        self.variance_threshold = variance_threshold

    def _fit(self, X, y):
        self.scaler_ = StandardScaler().fit(X.to_numpy(dtype=float))
        scaled = self.scaler_.transform(X.to_numpy(dtype=float))
        if not np.any(scaled.var(axis=0) > 0):
            raise DegenerateInput("Training matrix has no variance to project")

        self.pca_ = PCA(svd_solver="full").fit(scaled)
        self.n_components_ = components_for_variance(self.pca_.explained_variance_ratio_, self.variance_threshold)
        self.components_ = self.pca_.components_[: self.n_components_].copy()
        self.mean_ = self.pca_.mean_.copy()
        retained = float(self.pca_.explained_variance_ratio_[: self.n_components_].sum())
        logger.info(
            f"PCA keeps {self.n_components_} of {X.shape[1]} components "
            f"({retained:.1%} of variance, threshold {self.variance_threshold:.0%})"
        )

    def _apply(self, X):
        scaled = self.scaler_.transform(X.to_numpy(dtype=float))
        projected = (scaled - self.mean_) @ self.components_.T
        return pd.DataFrame(projected, index=X.index, columns=self._columns())

    def _columns(self):
        return [f"PC{i + 1}" for i in range(self.n_components_)]

    def _params(self):
        return {
            "columns": self._columns(),
            "center": self.scaler_.mean_,
            "scale": self.scaler_.scale_,
            "components": self.components_,
            "n_components": self.n_components_,
        }

    def __repr__(self):
        return f"VarianceProjectionStrategy(variance_threshold={self.variance_threshold})"
