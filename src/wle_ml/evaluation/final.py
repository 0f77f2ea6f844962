import logging

import pandas as pd

from wle_ml.common.errors import HoldoutAlreadyUsed
from wle_ml.domain.exercise import CLASS_LABELS, LABEL_COLUMN
from wle_ml.evaluation.metrics import ScoreRecord, score
from wle_ml.training.trainer import FittedModel

logger = logging.getLogger(__name__)


class FinalEvaluator:
    """Guards the test partition so it is scored at most once."""

    def __init__(self, test_frame: pd.DataFrame, feature_columns: list[str], classes=CLASS_LABELS):
        self._frame = test_frame
        self._feature_columns = list(feature_columns)
        self._classes = list(classes)
        self._used = False

    @property
    def used(self) -> bool:
        return self._used

    def evaluate(self, model: FittedModel) -> ScoreRecord:
        if self._used:
            raise HoldoutAlreadyUsed("The test partition has already been scored in this run")
        self._used = True

        record = score(model, self._frame[self._feature_columns], self._frame[LABEL_COLUMN], self._classes)
        logger.info(
            f"Test error for {model.strategy_name}: {record.error_pct:.2f}% over {record.n_rows} rows"
        )
        return record
