"""Reproducible train/test partitions over row indices.

Provides seeded random splitting so every model in a comparison sees
exactly the same rows. A Split holds read-only index arrays and is safe to
share between adapters.

Key Classes:
    DatasetSplitter - Creates train/test splits from a ModelDataset
    Split - Immutable pair of disjoint, exhaustive index arrays

Split Strategy:
    - Shuffle row positions with numpy's seeded Generator
    - Train set: first floor(train_fraction * n) shuffled positions
    - Test set: the rest

Usage:
    from tracklab.models import DatasetSplitter

    split = DatasetSplitter(train_fraction=0.8, seed=42).split(dataset)
    train_df = dataset.rows(split.train)
    test_df = dataset.rows(split.test)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict

import numpy as np

from tracklab.config import RANDOM_SEED, TRAIN_FRACTION
from tracklab.errors import InvalidFractionError


def _readonly(indices: np.ndarray) -> np.ndarray:
    arr = np.array(indices, dtype=np.int64)
    arr.setflags(write=False)
    return arr


def _partition(n_rows: int, train_fraction: float, seed: int) -> tuple:
    if not 0.0 < train_fraction < 1.0:
        raise InvalidFractionError(f"train_fraction must be in (0, 1), got {train_fraction}")

    n_train = math.floor(train_fraction * n_rows)
    if n_train == 0 or n_train == n_rows:
        raise InvalidFractionError(
            f"train_fraction={train_fraction} leaves an empty partition for {n_rows} rows"
        )

    rng = np.random.default_rng(seed)
    order = rng.permutation(n_rows)
    return np.sort(order[:n_train]), np.sort(order[n_train:])


@dataclass(frozen=True, eq=False)
class Split:
    """Immutable partition of row positions.

    Attributes:
        train: Sorted positions in the training set.
        test: Sorted positions in the held-out set.
        seed: Seed the partition was drawn with.
    """
    train: np.ndarray
    test: np.ndarray
    seed: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "train", _readonly(self.train))
        object.__setattr__(self, "test", _readonly(self.test))
        if np.intersect1d(self.train, self.test).size:
            raise ValueError("train and test indices overlap")

    @property
    def n_rows(self) -> int:
        return len(self.train) + len(self.test)

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "train_rows": len(self.train),
            "test_rows": len(self.test),
            "seed": self.seed,
        }

    def carve_validation(self, fraction: float, seed: int) -> "Split":
        """Partition the training positions into train' and validation.

        The returned Split's `test` side is the validation set. The original
        test positions are never touched, so thresholds tuned on the
        validation set do not leak test data.

        Args:
            fraction: Share of training rows moved to validation.
            seed: Seed for the carve-out.

        Raises:
            InvalidFractionError: If fraction is not in (0, 1) or leaves a side empty.
        """
        if not 0.0 < fraction < 1.0:
            raise InvalidFractionError(f"validation fraction must be in (0, 1), got {fraction}")
        keep, held = _partition(len(self.train), 1.0 - fraction, seed)
        return Split(train=self.train[keep], test=self.train[held], seed=seed)

    def print_summary(self) -> None:
        """Print split summary to console."""
        print("Split Summary:")
        print(f"  Train: {len(self.train):,} rows")
        print(f"  Test:  {len(self.test):,} rows")
        print(f"  Seed:  {self.seed}")


class DatasetSplitter:
    """Seeded random train/test splitter.

    Same seed and same row count always yield the same partition.

    Example:
        splitter = DatasetSplitter(train_fraction=0.8, seed=42)
        split = splitter.split(dataset)
    """

    def __init__(self, train_fraction: float = TRAIN_FRACTION, seed: int = RANDOM_SEED) -> None:
        if not 0.0 < train_fraction < 1.0:
            raise InvalidFractionError(f"train_fraction must be in (0, 1), got {train_fraction}")
        self.train_fraction = train_fraction
        self.seed = seed

    def split(self, dataset) -> Split:
        """Split a dataset (anything with len()) into train/test positions."""
        train, test = _partition(len(dataset), self.train_fraction, self.seed)
        return Split(train=train, test=test, seed=self.seed)


def split(dataset, train_fraction: float = TRAIN_FRACTION, seed: int = RANDOM_SEED) -> Split:
    """Module-level wrapper for DatasetSplitter(...).split()."""
    return DatasetSplitter(train_fraction=train_fraction, seed=seed).split(dataset)


def subsample(indices: np.ndarray, size: int, seed: int) -> np.ndarray:
    """Seeded subset of `indices` without replacement (sorted).

    Returns all indices when `size` is at least their count.
    """
    indices = np.asarray(indices)
    if size >= len(indices):
        return np.sort(indices)
    rng = np.random.default_rng(seed)
    return np.sort(rng.choice(indices, size=size, replace=False))
