"""
End-to-end strategy comparison.

Reduces the raw dataset, partitions it by subject, trains one bagged-tree
model per feature strategy, picks a winner on the validation partition and
scores only that winner on the test partition.
"""

import logging
from dataclasses import dataclass, field

import pandas as pd
from joblib import Parallel, delayed

from wle_ml.common.config import PipelineSettings
from wle_ml.common.errors import DegenerateInput, NoViableCandidate
from wle_ml.common.logging import setup_logger
from wle_ml.dataio.readers import load_dataset
from wle_ml.domain.exercise import LABEL_COLUMN
from wle_ml.evaluation.final import FinalEvaluator
from wle_ml.evaluation.metrics import ScoreRecord, score
from wle_ml.evaluation.selection import Candidate, StrategyFailure, select_model
from wle_ml.features.registry import STRATEGY_NAMES, build_strategy
from wle_ml.preprocessing.reducer import feature_columns, reduce_columns
from wle_ml.subjects.splitter import SubjectPartition, split_by_subject
from wle_ml.training.trainer import CPU, WALL, ModelTrainer

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    partition: SubjectPartition
    candidates: list[Candidate]
    failures: list[StrategyFailure]
    winner: Candidate
    test_score: ScoreRecord
    timing_basis: str
    settings: PipelineSettings = field(repr=False, default=None)

    @property
    def degenerate(self) -> list[Candidate]:
        return [c for c in self.candidates if c.score.degenerate]

    @property
    def excluded_degenerate(self) -> list[Candidate]:
        """Degenerate candidates that selection skipped (none when all were degenerate)."""
        degenerate = self.degenerate
        return degenerate if len(degenerate) < len(self.candidates) else []


def execution_plan(settings: PipelineSettings) -> tuple[int, int, str]:
    """Return ``(pipeline_jobs, cv_jobs, timing_basis)`` for the configured concurrency.

    Pipelines sharing a pool distort each other's wall-clock time, so
    concurrent runs are compared on CPU time with single-process CV inside
    each pipeline. Serial runs compare wall-clock time and may parallelize
    the CV folds instead.
    """
    pipeline_jobs = min(settings.concurrency, len(STRATEGY_NAMES))
    if pipeline_jobs > 1:
        return pipeline_jobs, 1, CPU
    return 1, settings.cv_jobs, WALL


def run_strategy(
    name: str,
    settings: PipelineSettings,
    train: pd.DataFrame,
    validation: pd.DataFrame,
    columns: list[str],
    cv_jobs: int = 1,
    timing_basis: str = WALL,
) -> Candidate | StrategyFailure:
    """Train and validate one strategy; failures come back as values, not exceptions."""
    # Worker processes start with an unconfigured package logger.
    setup_logger("wle_ml", settings.log_level)
    trainer = ModelTrainer.from_settings(settings, n_jobs=cv_jobs, timing_basis=timing_basis)
    try:
        model = trainer.train(build_strategy(name, settings), train[columns], train[LABEL_COLUMN])
        record = score(model, validation[columns], validation[LABEL_COLUMN])
    except DegenerateInput as e:
        logger.warning(f"[{name}] excluded: {e}")
        return StrategyFailure(strategy=name, reason=str(e))
    except Exception as e:
        # One strategy's crash must not take down its siblings.
        logger.exception(f"[{name}] failed")
        return StrategyFailure(strategy=name, reason=str(e), error_type=type(e).__name__)

    logger.info(f"[{name}] validation error {record.error_pct:.2f}%, coverage {sorted(record.coverage)}")
    return Candidate(strategy_name=name, model=model, score=record)


def evaluate_strategies(
    partition: SubjectPartition, settings: PipelineSettings
) -> tuple[list[Candidate], list[StrategyFailure], str]:
    columns = feature_columns(partition.train)
    pipeline_jobs, cv_jobs, timing_basis = execution_plan(settings)
    logger.info(f"Training {len(STRATEGY_NAMES)} strategies with {pipeline_jobs} worker(s), timing on {timing_basis}")

    outcomes = Parallel(n_jobs=pipeline_jobs)(
        delayed(run_strategy)(
            name, settings, partition.train, partition.validation, columns, cv_jobs, timing_basis
        )
        for name in STRATEGY_NAMES
    )
    candidates = [o for o in outcomes if isinstance(o, Candidate)]
    failures = [o for o in outcomes if isinstance(o, StrategyFailure)]
    return candidates, failures, timing_basis


def run_pipeline(raw: pd.DataFrame, settings: PipelineSettings | None = None) -> PipelineResult:
    settings = settings or PipelineSettings()
    reduced = reduce_columns(raw)

    # Both seeded draws happen here, before any worker starts.
    partition = split_by_subject(
        reduced, settings.split_seed_train, settings.split_seed_test, settings.n_train_subjects
    )

    candidates, failures, timing_basis = evaluate_strategies(partition, settings)
    if not candidates:
        raise NoViableCandidate(failures)
    winner = select_model(candidates, settings.selection_tolerance, failures)

    evaluator = FinalEvaluator(partition.test, feature_columns(reduced))
    test_score = evaluator.evaluate(winner.model)

    return PipelineResult(
        partition=partition,
        candidates=candidates,
        failures=failures,
        winner=winner,
        test_score=test_score,
        timing_basis=timing_basis,
        settings=settings,
    )


def run_from_source(settings: PipelineSettings) -> PipelineResult:
    raw = load_dataset(settings.source_name, settings.cache_dir)
    return run_pipeline(raw, settings)
