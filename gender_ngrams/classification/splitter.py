"""Train/test assignment of records."""

from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Sequence, Tuple
import logging

import numpy as np
from sklearn.model_selection import train_test_split

from gender_ngrams.core.constants import DEFAULT_SEED, SPLIT_METHODS, TRAIN, TEST
from gender_ngrams.core.exceptions import InputShapeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitAssignment:
    """
    Fixed mapping from record id to "train" or "test".

    Generated once per run; features and labels are both sliced with it.
    """

    assignment: Dict[Hashable, str]
    train_fraction: float
    seed: int
    method: str

    @property
    def train_ids(self) -> Tuple[Hashable, ...]:
        return tuple(rid for rid, part in self.assignment.items() if part == TRAIN)

    @property
    def test_ids(self) -> Tuple[Hashable, ...]:
        return tuple(rid for rid, part in self.assignment.items() if part == TEST)

    @property
    def realized_fraction(self) -> float:
        """Share of records actually assigned to train."""
        if not self.assignment:
            return 0.0
        return len(self.train_ids) / len(self.assignment)

    def mask_for(self, record_ids: Sequence[Hashable], part: str = TRAIN) -> np.ndarray:
        """
        Boolean row mask selecting ``part`` among ``record_ids``.

        Raises:
            InputShapeError: If a record id has no assignment
        """
        missing = [rid for rid in record_ids if rid not in self.assignment]
        if missing:
            raise InputShapeError(f"Record ids without split assignment: {missing[:10]}")
        return np.array([self.assignment[rid] == part for rid in record_ids], dtype=bool)


def split_records(
    record_ids: Sequence[Hashable],
    train_fraction: float,
    seed: int = DEFAULT_SEED,
    method: str = "independent",
    labels: Optional[Sequence[str]] = None,
) -> SplitAssignment:
    """
    Assign every record to train or test.

    Methods:
        - "independent": each record goes to train with probability
          ``train_fraction``; the realized ratio only approaches it as N grows
        - "exact": exactly round(train_fraction * N) records go to train
        - "stratified": exact count per label (requires ``labels``)

    Args:
        record_ids: Unique record identifiers, in record order
        train_fraction: Target share of training records, in (0, 1)
        seed: Random seed; the same seed and ids give the same split
        method: One of "independent", "exact", "stratified"
        labels: Labels aligned with record_ids (stratified only)

    Returns:
        SplitAssignment covering every record exactly once

    Examples:
        >>> split = split_records(range(100), 0.7, seed=1)
        >>> len(split.train_ids) + len(split.test_ids)
        100
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    if method not in SPLIT_METHODS:
        raise ValueError(f"Unknown split method: {method}")

    record_ids = list(record_ids)
    if len(set(record_ids)) != len(record_ids):
        raise InputShapeError("Record ids must be unique to split")

    n = len(record_ids)
    rng = np.random.default_rng(seed)

    if method == "independent":
        in_train = rng.random(n) < train_fraction
    elif method == "exact":
        n_train = int(round(train_fraction * n))
        in_train = np.zeros(n, dtype=bool)
        in_train[rng.permutation(n)[:n_train]] = True
    else:
        if labels is None:
            raise ValueError("Stratified split requires labels")
        if len(labels) != n:
            raise InputShapeError(
                f"Got {len(labels)} labels for {n} records"
            )
        train_pos, _ = train_test_split(
            np.arange(n),
            train_size=train_fraction,
            random_state=seed,
            stratify=list(labels),
        )
        in_train = np.zeros(n, dtype=bool)
        in_train[train_pos] = True

    assignment = {
        rid: TRAIN if flag else TEST for rid, flag in zip(record_ids, in_train)
    }
    split = SplitAssignment(
        assignment=assignment,
        train_fraction=train_fraction,
        seed=seed,
        method=method,
    )
    logger.info(
        f"{method} split (p={train_fraction}, seed={seed}): "
        f"{len(split.train_ids)} train / {len(split.test_ids)} test"
    )
    return split
