"""Feature engineering module.

Public API:
    FeatureDeriver - Validate raw tracks and derive model features
    ModelDataset - Immutable model-ready table
    MODEL_COLUMNS - Model dataset columns (15 predictors + target)

Usage:
    from tracklab.features import FeatureDeriver

    dataset = FeatureDeriver().derive(raw_df)
"""

from tracklab.features.builder import (
    FeatureDeriver,
    ModelDataset,
    assign_decades,
    count_artists,
    decade_for_year,
)
from tracklab.features.definitions import (
    CATEGORICAL_COLUMNS,
    MODEL_COLUMNS,
    predictors_for,
    task_for_target,
)

__all__ = [
    # Core API
    "FeatureDeriver",
    "ModelDataset",
    "MODEL_COLUMNS",
    "CATEGORICAL_COLUMNS",
    "predictors_for",
    "task_for_target",
    # Derivation helpers
    "count_artists",
    "decade_for_year",
    "assign_decades",
]
