"""Centralized configuration for Tracklab.

All paths, split settings, model grids and evaluation defaults in one place.
Environment variables can override defaults.

Path Constants:
    PROJECT_ROOT - Root directory of the project
    STORAGE_DIR - Storage for datasets and reports
    REPORTS_DIR - Comparison reports (JSON)
    DEFAULT_DATA_PATH - Raw track CSV (overridable via TRACKLAB_DATA_PATH)

Run Constants:
    RANDOM_SEED - Seed for split, subsampling and CV folds (TRACKLAB_SEED)
    TRAIN_FRACTION - Share of rows in the training partition
    POPULARITY_RANGE - Valid domain of the regression target
    DEFAULT_THRESHOLD - Probability cut-off for classification

Environment Variables:
    TRACKLAB_DATA_PATH - Override default data path
    TRACKLAB_SEED - Override default random seed
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from tracklab.errors import InvalidFractionError, InvalidRangeError

# Project root (src/tracklab/config.py -> tracklab -> src -> project_root)
PROJECT_ROOT = Path(__file__).parent.parent.parent
STORAGE_DIR = PROJECT_ROOT / "storage"
REPORTS_DIR = STORAGE_DIR / "reports"

DEFAULT_DATA_PATH = os.environ.get(
    "TRACKLAB_DATA_PATH",
    str(STORAGE_DIR / "data.csv")
)

# Reproducibility
RANDOM_SEED = int(os.environ.get("TRACKLAB_SEED", "42"))

# Split
TRAIN_FRACTION = 0.8

# Target domains
POPULARITY_RANGE: Tuple[float, float] = (0.0, 100.0)
DEFAULT_THRESHOLD = 0.5

# Adapters refuse to fit on fewer than this many rows per predictor
MIN_ROWS_PER_PREDICTOR = 2

# Subsample sizes for expensive adapters (rows drawn from the train split)
FOREST_SUBSAMPLE = 10_000
SVM_SUBSAMPLE = 2_000

CV_FOLDS = 5

# Lasso penalty grid; an optimum at or below NEAR_ZERO_PENALTY keeps every predictor
LASSO_ALPHAS = [0.0001, 0.001, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0]
NEAR_ZERO_PENALTY = 0.001

# SVC grids
SVM_LINEAR_GRID = {"C": [0.01, 0.1, 1.0, 10.0]}
SVM_POLY_GRID = {"C": [0.1, 1.0, 10.0], "gamma": [0.01, 0.1, 1.0]}

# Thresholds tried when tuning on the validation split
THRESHOLD_GRID = [round(0.05 * i, 2) for i in range(1, 20)]
VALIDATION_FRACTION = 0.2

# Shared with the LightGBM regressor
BOOSTED_TREE_PARAMS = {
    "objective": "regression",
    "verbosity": -1,
    "boosting_type": "gbdt",
    "learning_rate": 0.07,
    "num_leaves": 8,
    "min_child_samples": 150,
    "colsample_bytree": 0.7,
    "subsample": 0.8,
    "subsample_freq": 5,
    "n_estimators": 100,
}


def _check_fraction(name: str, value: float) -> None:
    if not 0.0 < value < 1.0:
        raise InvalidFractionError(f"{name} must be in (0, 1), got {value}")


def _check_threshold(value: float) -> None:
    if not 0.0 < value < 1.0:
        raise InvalidRangeError(f"threshold must be in (0, 1), got {value}")


@dataclass(frozen=True)
class RunConfig:
    """Validated settings for one comparison run.

    Attributes:
        seed: Seed shared by the split, subsampling and CV folds.
        train_fraction: Share of rows in the training partition.
        threshold: Probability cut-off for classification adapters.
        tune_thresholds: Select thresholds on a validation carve-out.
        validation_fraction: Share of the train split held out for tuning.
        threshold_grid: Candidate thresholds for tuning.
        data_path: Raw track CSV.
    """
    seed: int = RANDOM_SEED
    train_fraction: float = TRAIN_FRACTION
    threshold: float = DEFAULT_THRESHOLD
    tune_thresholds: bool = False
    validation_fraction: float = VALIDATION_FRACTION
    threshold_grid: List[float] = field(default_factory=lambda: list(THRESHOLD_GRID))
    data_path: Optional[str] = None

    def __post_init__(self) -> None:
        _check_fraction("train_fraction", self.train_fraction)
        _check_fraction("validation_fraction", self.validation_fraction)
        _check_threshold(self.threshold)
        for t in self.threshold_grid:
            _check_threshold(t)

    @property
    def resolved_data_path(self) -> Path:
        return Path(self.data_path or DEFAULT_DATA_PATH)
