"""Exception hierarchy for the evaluation pipeline."""


class PipelineError(Exception):
    """Base class for every error raised by wle_ml."""


class SchemaMismatch(PipelineError):
    """Raised when an input dataset lacks expected columns."""

    def __init__(self, missing):
        self.missing = sorted(missing)
        super().__init__(f"Missing required columns: {self.missing}")


class InsufficientSubjects(PipelineError):
    """Raised when there are too few subjects to fill train/validation/test."""

    def __init__(self, found: int, required: int = 3):
        self.found = found
        self.required = required
        super().__init__(f"Need at least {required} distinct subjects, found {found}")


class DegenerateInput(PipelineError):
    """Raised when a feature strategy cannot be fit on the training matrix."""


class NoViableCandidate(PipelineError):
    """Raised when no strategy produced a model that can be selected."""

    def __init__(self, failures=None):
        self.failures = list(failures or [])
        if self.failures:
            reasons = "; ".join(f"{f.strategy}: {f.reason}" for f in self.failures)
            message = f"No viable candidate model ({reasons})"
        else:
            message = "No viable candidate model"
        super().__init__(message)


class HoldoutAlreadyUsed(PipelineError):
    """Raised when the test partition is scored a second time."""
