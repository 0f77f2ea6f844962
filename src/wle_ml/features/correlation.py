import heapq
import itertools
import logging

import numpy as np
import pandas as pd

from wle_ml.common.errors import DegenerateInput
from wle_ml.features.base import ColumnSubsetStrategy

logger = logging.getLogger(__name__)


def _require_variation(X: pd.DataFrame) -> pd.DataFrame:
    X = X.astype(float)
    constant = list(X.columns[X.std(ddof=0) == 0])
    if constant:
        raise DegenerateInput(f"Constant columns have undefined correlation: {constant}")
    return X


def absolute_correlation(X: pd.DataFrame) -> np.ndarray:
    corr = _require_variation(X).corr().abs().to_numpy(copy=True)
    np.fill_diagonal(corr, 1.0)
    return np.clip(corr, 0.0, 1.0)


def class_correlation(X: pd.DataFrame, y) -> np.ndarray:
    """Prior-weighted mean absolute correlation of each feature with the class indicators."""
    X = _require_variation(X)
    y = pd.Series(np.asarray(y), index=X.index)
    if y.nunique() < 2:
        raise DegenerateInput("Feature-class correlation needs at least two classes")

    relevance = np.zeros(X.shape[1])
    for label, prior in y.value_counts(normalize=True).items():
        indicator = (y == label).astype(float)
        relevance += prior * X.corrwith(indicator).abs().to_numpy()
    return np.clip(relevance, 0.0, 1.0)


def prune_correlated(corr: np.ndarray, cutoff: float) -> list[int]:
    """Indices that survive greedy removal of pairs correlated above ``cutoff``.

    The most correlated remaining pair is handled first. Of the two, the one
    with the higher mean absolute correlation to the other remaining features
    is dropped; on a tie the later column goes.
    """
    keep = list(range(corr.shape[0]))
    while len(keep) > 1:
        sub = corr[np.ix_(keep, keep)].copy()
        np.fill_diagonal(sub, 0.0)
        i, j = np.unravel_index(np.argmax(sub), sub.shape)
        if sub[i, j] <= cutoff:
            break
        i, j = min(i, j), max(i, j)
        mean_i = sub[i].sum() / (len(keep) - 1)
        mean_j = sub[j].sum() / (len(keep) - 1)
        drop = i if mean_i > mean_j and not np.isclose(mean_i, mean_j) else j
        del keep[drop]
    return keep


class CorrelationPruningStrategy(ColumnSubsetStrategy):
    name = "correlation"

    def __init__(self, cutoff: float = 0.6):
        if not 0.0 < cutoff <= 1.0:
            raise ValueError(f"cutoff must be in (0, 1], got {cutoff}")
        self.cutoff = cutoff

    def _fit(self, X, y):
        keep = prune_correlated(absolute_correlation(X), self.cutoff)
        self.selected_columns_ = [X.columns[i] for i in keep]
        self.dropped_columns_ = [c for c in X.columns if c not in self.selected_columns_]
        logger.info(
            f"Correlation pruning at {self.cutoff} keeps {len(self.selected_columns_)} "
            f"of {X.shape[1]} columns"
        )

    def __repr__(self):
        return f"CorrelationPruningStrategy(cutoff={self.cutoff})"


def subset_merit(subset, relevance: np.ndarray, redundancy: np.ndarray) -> float:
    k = len(subset)
    if k == 0:
        return 0.0
    idx = list(subset)
    r_cf = relevance[idx].mean()
    r_ff = (redundancy[np.ix_(idx, idx)].sum() - k) / (k * (k - 1)) if k > 1 else 0.0
    return float(k * r_cf / np.sqrt(k + k * (k - 1) * r_ff))


def best_first_search(relevance: np.ndarray, redundancy: np.ndarray, max_backtracks: int = 5):
    """Forward best-first search over feature subsets, maximizing ``subset_merit``.

    Stops once ``max_backtracks`` consecutive expansions fail to improve on
    the best subset seen so far.
    """
    n_features = len(relevance)
    tie = itertools.count()
    start = frozenset()
    queue = [(0.0, next(tie), start)]
    seen = {start}
    best, best_merit = start, 0.0
    stale = 0

    while queue and stale < max_backtracks:
        _, _, subset = heapq.heappop(queue)
        improved = False
        for feature in range(n_features):
            if feature in subset:
                continue
            child = subset | {feature}
            if child in seen:
                continue
            seen.add(child)
            merit = subset_merit(child, relevance, redundancy)
            heapq.heappush(queue, (-merit, next(tie), child))
            if merit > best_merit + 1e-12:
                best, best_merit = child, merit
                improved = True
        stale = 0 if improved else stale + 1

    return sorted(best), best_merit


class CorrelationRelevanceStrategy(ColumnSubsetStrategy):
    """Correlation-based feature selection (CFS).

    Searches for the subset whose features correlate strongly with the
    outcome but weakly with each other.
    """

    name = "cfs"

    def __init__(self, max_backtracks: int = 5):
        self.max_backtracks = max_backtracks

    def _fit(self, X, y):
        if y is None:
            raise ValueError("CorrelationRelevanceStrategy needs outcome labels to fit")
        if len(y) != len(X):
            raise ValueError(f"Got {len(y)} labels for {len(X)} rows")

        relevance = class_correlation(X, y)
        redundancy = absolute_correlation(X)
        selected, merit = best_first_search(relevance, redundancy, self.max_backtracks)
        if not selected:
            raise DegenerateInput("No feature subset correlates with the outcome")

        self.selected_columns_ = [X.columns[i] for i in selected]
        self.merit_ = merit
        logger.info(f"CFS selected {len(selected)} of {X.shape[1]} columns (merit {merit:.4f})")

    def __repr__(self):
        return f"CorrelationRelevanceStrategy(max_backtracks={self.max_backtracks})"
