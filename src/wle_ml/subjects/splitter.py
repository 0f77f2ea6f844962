import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import numpy as np
import pandas as pd

from wle_ml.common.errors import InsufficientSubjects
from wle_ml.domain.exercise import SUBJECT_COLUMN

logger = logging.getLogger(__name__)

TRAIN, VALIDATION, TEST = "train", "validation", "test"
PARTITIONS = (TRAIN, VALIDATION, TEST)


@dataclass(frozen=True)
class SubjectPartition:
    assignment: Mapping[str, str]
    train: pd.DataFrame
    validation: pd.DataFrame
    test: pd.DataFrame

    def subjects(self, partition: str) -> list[str]:
        return sorted(s for s, p in self.assignment.items() if p == partition)

    def frame(self, partition: str) -> pd.DataFrame:
        if partition not in PARTITIONS:
            raise ValueError(f"Unknown partition: {partition}")
        return getattr(self, partition)

    def summary(self) -> dict:
        return {
            partition: {"subjects": self.subjects(partition), "rows": len(self.frame(partition))}
            for partition in PARTITIONS
        }


def seeded_rank(items, seed: int) -> list:
    """Order items by one uniform draw each, highest draw first.

    Items are sorted before drawing so the ranking only depends on the set of
    items and the seed, never on their order of appearance.
    """
    ordered = sorted(items)
    draws = np.random.default_rng(seed).random(len(ordered))
    ranking = np.argsort(-draws, kind="stable")
    return [ordered[i] for i in ranking]


def assign_subjects(subjects, seed_train: int, seed_test: int, n_train: int = 4) -> Mapping[str, str]:
    subjects = sorted(set(subjects))
    if len(subjects) < 3:
        raise InsufficientSubjects(len(subjects))

    # Leave at least one subject each for validation and test.
    n_train = min(n_train, len(subjects) - 2)
    ranked = seeded_rank(subjects, seed_train)
    train, rest = ranked[:n_train], ranked[n_train:]

    ranked_rest = seeded_rank(rest, seed_test)
    assignment = {s: TRAIN for s in train}
    assignment[ranked_rest[0]] = TEST
    assignment.update({s: VALIDATION for s in ranked_rest[1:]})
    return MappingProxyType(dict(sorted(assignment.items())))


def split_by_subject(
    df: pd.DataFrame, seed_train: int, seed_test: int, n_train: int = 4, subject_col: str = SUBJECT_COLUMN
) -> SubjectPartition:
    """Partition rows by subject so no subject appears in two partitions."""
    assignment = assign_subjects(df[subject_col].unique(), seed_train, seed_test, n_train)
    labels = df[subject_col].map(dict(assignment))

    partition = SubjectPartition(
        assignment=assignment,
        train=df[labels == TRAIN],
        validation=df[labels == VALIDATION],
        test=df[labels == TEST],
    )
    for name, info in partition.summary().items():
        logger.info(f"{name}: {info['rows']} rows from subjects {info['subjects']}")
    return partition
