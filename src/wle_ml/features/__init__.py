from .base import FeatureStrategy, IdentityStrategy
from .correlation import CorrelationPruningStrategy, CorrelationRelevanceStrategy
from .projection import VarianceProjectionStrategy
from .registry import STRATEGY_NAMES, build_strategies, build_strategy

__all__ = [
    "FeatureStrategy",
    "IdentityStrategy",
    "VarianceProjectionStrategy",
    "CorrelationPruningStrategy",
    "CorrelationRelevanceStrategy",
    "STRATEGY_NAMES",
    "build_strategies",
    "build_strategy",
]
