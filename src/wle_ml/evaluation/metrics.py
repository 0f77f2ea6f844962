from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from wle_ml.domain.exercise import CLASS_LABELS


@dataclass(frozen=True)
class ScoreRecord:
    error_rate: float
    coverage: frozenset
    training_seconds: float
    confusion: pd.DataFrame = field(repr=False, compare=False)
    n_rows: int = 0
    classes: tuple = tuple(CLASS_LABELS)

    @property
    def degenerate(self) -> bool:
        """True when some class was never predicted."""
        return self.coverage < frozenset(self.classes)

    @property
    def missing_classes(self) -> list[str]:
        return [c for c in self.classes if c not in self.coverage]

    @property
    def error_pct(self) -> float:
        return 100.0 * self.error_rate

    def to_dict(self) -> dict:
        return {
            "error_rate": self.error_rate,
            "error_pct": round(self.error_pct, 4),
            "training_seconds": self.training_seconds,
            "n_rows": self.n_rows,
            "coverage": sorted(self.coverage),
            "degenerate": self.degenerate,
            "confusion_matrix": {
                "rows": "predicted",
                "columns": "true",
                "labels": list(self.classes),
                "counts": self.confusion.to_numpy().tolist(),
            },
        }


def build_confusion_matrix(y_true, y_pred, classes=CLASS_LABELS) -> pd.DataFrame:
    """Cross-tabulate predictions (rows) against true labels (columns)."""
    classes = list(classes)
    # sklearn puts true labels on rows; transpose to predicted x true.
    counts = confusion_matrix(y_true, y_pred, labels=classes).T
    return pd.DataFrame(
        counts,
        index=pd.Index(classes, name="predicted"),
        columns=pd.Index(classes, name="true"),
    )


def error_rate(confusion: pd.DataFrame) -> float:
    total = int(confusion.to_numpy().sum())
    if total == 0:
        return 0.0
    return float((total - np.trace(confusion.to_numpy())) / total)


def score_predictions(y_true, y_pred, training_seconds: float = 0.0, classes=CLASS_LABELS) -> ScoreRecord:
    y_true, y_pred = np.asarray(y_true), np.asarray(y_pred)
    if len(y_true) != len(y_pred):
        raise ValueError(f"Got {len(y_pred)} predictions for {len(y_true)} labels")
    unknown = (set(np.unique(y_true)) | set(np.unique(y_pred))) - set(classes)
    if unknown:
        raise ValueError(f"Labels outside the class set: {sorted(unknown)}")

    confusion = build_confusion_matrix(y_true, y_pred, classes)
    return ScoreRecord(
        error_rate=error_rate(confusion),
        coverage=frozenset(np.unique(y_pred).tolist()) & frozenset(classes),
        training_seconds=float(training_seconds),
        confusion=confusion,
        n_rows=len(y_true),
        classes=tuple(classes),
    )


def score(model, X: pd.DataFrame, y_true, classes=CLASS_LABELS) -> ScoreRecord:
    """Score a fitted model on raw features against the true labels."""
    if len(X) != len(y_true):
        raise ValueError(f"Feature matrix has {len(X)} rows but {len(y_true)} labels were given")
    return score_predictions(y_true, model.predict(X), model.training_seconds, classes)
