import logging
from dataclasses import dataclass

from wle_ml.common.errors import NoViableCandidate
from wle_ml.evaluation.metrics import ScoreRecord
from wle_ml.training.trainer import FittedModel

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    strategy_name: str
    model: FittedModel
    score: ScoreRecord


@dataclass
class StrategyFailure:
    strategy: str
    reason: str
    error_type: str = "DegenerateInput"


def select_model(candidates: list[Candidate], tolerance: float = 0.0, failures=None) -> Candidate:
    """Pick the winning candidate.

    Rules, in order:
      1. Drop candidates that never predict some class, unless all of them do.
      2. Drop candidates whose error exceeds the best error by more than
         ``tolerance``; the rest are tied.
      3. Return the tied candidate with the lowest training time. Equal times
         keep input order.

    Raises:
        NoViableCandidate: If ``candidates`` is empty.
    """
    if not candidates:
        raise NoViableCandidate(failures)

    pool = [c for c in candidates if not c.score.degenerate]
    if not pool:
        logger.warning("Every candidate is degenerate; selecting among all of them")
        pool = list(candidates)
    else:
        for c in candidates:
            if c.score.degenerate:
                logger.info(f"Excluding {c.strategy_name}: never predicts {c.score.missing_classes}")

    best_error = min(c.score.error_rate for c in pool)
    # Small epsilon so floating noise in equal error rates still counts as a tie.
    tied = [c for c in pool if c.score.error_rate - best_error <= tolerance + 1e-12]
    winner = min(tied, key=lambda c: c.score.training_seconds)

    logger.info(
        f"Selected {winner.strategy_name} (error {winner.score.error_pct:.2f}%, "
        f"{winner.score.training_seconds:.2f}s) from tied {[c.strategy_name for c in tied]}"
    )
    return winner
