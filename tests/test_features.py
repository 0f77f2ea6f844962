import numpy as np
import pandas as pd
import pytest
from sklearn.exceptions import NotFittedError

from wle_ml.common.errors import DegenerateInput
from wle_ml.features import (
    CorrelationPruningStrategy,
    CorrelationRelevanceStrategy,
    IdentityStrategy,
    VarianceProjectionStrategy,
    build_strategies,
)
from wle_ml.features.correlation import (
    absolute_correlation,
    best_first_search,
    class_correlation,
    prune_correlated,
    subset_merit,
)
from wle_ml.features.projection import components_for_variance
from wle_ml.common.config import PipelineSettings
from wle_ml.domain.exercise import LABEL_COLUMN
from wle_ml.preprocessing.reducer import feature_columns


def _split(frame):
    return frame[feature_columns(frame)], frame[LABEL_COLUMN]


def _assert_params_equal(before, after):
    assert before.keys() == after.keys()
    for key in before:
        np.testing.assert_array_equal(np.asarray(before[key]), np.asarray(after[key]))


@pytest.mark.parametrize("strategy", build_strategies(), ids=lambda s: s.name)
def test_output_shape(sensor_frame, strategy):
    X, y = _split(sensor_frame)
    out = strategy.fit(X, y).apply(X)
    assert len(out) == len(X)
    assert out.index.equals(X.index)
    if isinstance(strategy, IdentityStrategy):
        assert out.shape[1] == X.shape[1]
    else:
        assert 1 <= out.shape[1] <= X.shape[1]
    assert list(out.columns) == strategy.output_columns


@pytest.mark.parametrize("strategy", build_strategies(), ids=lambda s: s.name)
def test_apply_never_refits(sensor_frame, strategy):
    train, other = sensor_frame.iloc[::2], sensor_frame.iloc[1::2]
    X, y = _split(train)
    strategy.fit(X, y)
    before = strategy.fitted_params

    shifted = other[feature_columns(other)] * 10 + 5
    strategy.apply(shifted)

    _assert_params_equal(before, strategy.fitted_params)


@pytest.mark.parametrize("strategy", build_strategies(), ids=lambda s: s.name)
def test_apply_before_fit(sensor_frame, strategy):
    X, _ = _split(sensor_frame)
    with pytest.raises(NotFittedError):
        strategy.apply(X)


@pytest.mark.parametrize("strategy", build_strategies(), ids=lambda s: s.name)
def test_degenerate_shapes(strategy):
    one_column = pd.DataFrame({"a": np.arange(10.0)})
    with pytest.raises(DegenerateInput, match="at least 2 columns"):
        strategy.fit(one_column, ["A", "B"] * 5)

    wide = pd.DataFrame(np.random.default_rng(0).normal(size=(3, 5)), columns=list("abcde"))
    with pytest.raises(DegenerateInput, match="fewer rows"):
        strategy.fit(wide, ["A", "B", "A"])


def test_identity_returns_input(sensor_frame):
    X, _ = _split(sensor_frame)
    out = IdentityStrategy().fit(X).apply(X)
    pd.testing.assert_frame_equal(out, X)


def test_collinear_pair_drops_exactly_one():
    rng = np.random.default_rng(1)
    base = rng.normal(size=300)
    X = pd.DataFrame(
        {"a": base, "b": 2.0 * base + 1.0, "c": rng.normal(size=300), "d": rng.normal(size=300)}
    )
    strategy = CorrelationPruningStrategy(cutoff=0.6).fit(X)
    assert len(strategy.dropped_columns_) == 1
    assert strategy.dropped_columns_[0] in ("a", "b")
    assert {"c", "d"} <= set(strategy.selected_columns_)


def test_pruning_prefers_dropping_the_more_redundant_feature():
    corr = np.array(
        [
            [1.0, 0.9, 0.1],
            [0.9, 1.0, 0.5],
            [0.1, 0.5, 1.0],
        ]
    )
    assert prune_correlated(corr, 0.6) == [0, 2]


def test_pruning_keeps_everything_below_cutoff():
    corr = np.array([[1.0, 0.6], [0.6, 1.0]])
    assert prune_correlated(corr, 0.6) == [0, 1]


def test_pruning_rejects_constant_column():
    X = pd.DataFrame({"a": np.arange(10.0), "b": np.ones(10), "c": np.arange(10.0) ** 2})
    with pytest.raises(DegenerateInput, match="Constant"):
        CorrelationPruningStrategy().fit(X)


def test_projection_single_dominant_component():
    rng = np.random.default_rng(2)
    latent = rng.normal(size=(500, 1))
    X = pd.DataFrame(latent @ np.ones((1, 5)) + 0.1 * rng.normal(size=(500, 5)), columns=list("abcde"))
    strategy = VarianceProjectionStrategy(variance_threshold=0.5).fit(X)
    assert strategy.pca_.explained_variance_ratio_[0] > 0.9
    assert strategy.n_components_ == 1
    assert list(strategy.apply(X).columns) == ["PC1"]


def test_projection_threshold_controls_components():
    X = pd.DataFrame(np.random.default_rng(3).normal(size=(400, 6)), columns=list("abcdef"))
    low = VarianceProjectionStrategy(0.3).fit(X).n_components_
    high = VarianceProjectionStrategy(0.95).fit(X).n_components_
    assert low < high <= 6


def test_components_for_variance():
    assert components_for_variance([0.9, 0.05, 0.05], 0.5) == 1
    assert components_for_variance([0.3, 0.2, 0.5], 0.5) == 2
    assert components_for_variance([0.3, 0.2, 0.5], 1.0) == 3


def test_projection_rejects_invalid_threshold():
    with pytest.raises(ValueError):
        VarianceProjectionStrategy(variance_threshold=0.0)


def test_cfs_prefers_relevant_and_non_redundant_features():
    rng = np.random.default_rng(4)
    y = np.repeat(["A", "B", "C"], 100)
    signal = np.select([y == "A", y == "B"], [0.0, 3.0], 6.0) + rng.normal(size=300)
    X = pd.DataFrame(
        {
            "signal": signal,
            "copy": signal + rng.normal(size=300),
            "noise1": rng.normal(size=300),
            "noise2": rng.normal(size=300),
        }
    )
    strategy = CorrelationRelevanceStrategy().fit(X, y)
    assert "signal" in strategy.selected_columns_ or "copy" in strategy.selected_columns_
    assert not {"signal", "copy"} <= set(strategy.selected_columns_)
    assert "noise1" not in strategy.selected_columns_


def test_cfs_requires_labels(sensor_frame):
    X, _ = _split(sensor_frame)
    with pytest.raises(ValueError, match="labels"):
        CorrelationRelevanceStrategy().fit(X)


def test_cfs_single_class_is_degenerate(sensor_frame):
    X, _ = _split(sensor_frame)
    with pytest.raises(DegenerateInput):
        CorrelationRelevanceStrategy().fit(X, ["A"] * len(X))


def test_subset_merit():
    relevance = np.array([0.8, 0.8, 0.1])
    redundancy = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    assert subset_merit([], relevance, redundancy) == 0.0
    assert subset_merit([0], relevance, redundancy) == pytest.approx(0.8)
    assert subset_merit([0, 1], relevance, redundancy) == pytest.approx(2 * 0.8 / np.sqrt(2))

    redundant = np.ones((3, 3))
    assert subset_merit([0, 1], relevance, redundant) == pytest.approx(0.8)


def test_best_first_search_finds_independent_relevant_pair():
    relevance = np.array([0.8, 0.8, 0.1])
    redundancy = np.eye(3)
    selected, merit = best_first_search(relevance, redundancy)
    assert selected[:2] == [0, 1]
    assert merit >= subset_merit([0, 1], relevance, redundancy)


def test_class_correlation_is_bounded(sensor_frame):
    X, y = _split(sensor_frame)
    relevance = class_correlation(X, y)
    assert relevance.shape == (X.shape[1],)
    assert np.all((relevance >= 0) & (relevance <= 1))


def test_strategies_follow_settings():
    settings = PipelineSettings(pca_variance_threshold=0.8, correlation_cutoff=0.9, cfs_max_backtracks=2)
    identity, pca, correlation, cfs = build_strategies(settings)
    assert identity.name == "identity"
    assert pca.variance_threshold == 0.8
    assert correlation.cutoff == 0.9
    assert cfs.max_backtracks == 2


def test_absolute_correlation_matches_pearson(sensor_frame):
    X, _ = _split(sensor_frame)
    X = X.iloc[:, :6]
    expected = np.abs(np.corrcoef(X.to_numpy(), rowvar=False))
    np.testing.assert_allclose(absolute_correlation(X), expected, atol=1e-12)


def test_class_correlation_of_binary_outcome():
    y = np.array(["A"] * 5 + ["B"] * 5)
    X = pd.DataFrame({"aligned": (y == "A").astype(float) * 2.0 - 1.0, "noise": np.arange(10.0) % 3})
    relevance = class_correlation(X, y)
    assert relevance[0] == pytest.approx(1.0)
    assert relevance[1] < 1.0
