from wle_ml.features.base import FeatureStrategy, IdentityStrategy
from wle_ml.features.correlation import CorrelationPruningStrategy, CorrelationRelevanceStrategy
from wle_ml.features.projection import VarianceProjectionStrategy

STRATEGY_NAMES = ["identity", "pca", "correlation", "cfs"]


def build_strategy(name: str, settings=None) -> FeatureStrategy:
    """Create an unfitted strategy, reading its parameters from ``settings`` when given."""
    if name == "identity":
        return IdentityStrategy()
    if name == "pca":
        threshold = settings.pca_variance_threshold if settings is not None else 0.5
        return VarianceProjectionStrategy(variance_threshold=threshold)
    if name == "correlation":
        cutoff = settings.correlation_cutoff if settings is not None else 0.6
        return CorrelationPruningStrategy(cutoff=cutoff)
    if name == "cfs":
        backtracks = settings.cfs_max_backtracks if settings is not None else 5
        return CorrelationRelevanceStrategy(max_backtracks=backtracks)
    raise ValueError(f"Unknown feature strategy: {name}")


def build_strategies(settings=None) -> list[FeatureStrategy]:
    return [build_strategy(name, settings) for name in STRATEGY_NAMES]
