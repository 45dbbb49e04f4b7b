"""Models module - dataset splitting and model-family adapters.

This module contains:
- splits: Seeded train/test partition (DatasetSplitter, Split, subsample)
- base: ModelAdapter interface, FittedModel, FitOptions
- baseline: Mean / majority reference adapters
- linear: OLS, lasso, logistic regression
- trees: Decision tree, random forest, LightGBM
- discriminant: LDA, QDA
- neighbors: k-nearest neighbors
- svm: Support vector classifiers (linear, polynomial)
- registry: Default adapter suites and lookup by name

For a comparison suite, use tracklab.models.registry.default_adapters().
"""

from tracklab.models.splits import DatasetSplitter, Split, split, subsample
from tracklab.models.base import FitOptions, FittedModel, ModelAdapter
from tracklab.models.baseline import MajorityBaselineAdapter, MeanBaselineAdapter
from tracklab.models.linear import LassoAdapter, LinearRegressionAdapter, LogisticRegressionAdapter
from tracklab.models.trees import BoostedTreeAdapter, DecisionTreeAdapter, RandomForestAdapter
from tracklab.models.discriminant import LinearDiscriminantAdapter, QuadraticDiscriminantAdapter
from tracklab.models.neighbors import KNeighborsAdapter
from tracklab.models.svm import SupportVectorAdapter
from tracklab.models.registry import (
    classification_adapters,
    default_adapters,
    get_adapter,
    regression_adapters,
)

__all__ = [
    # Splitting
    "DatasetSplitter",
    "Split",
    "split",
    "subsample",
    # Protocol
    "ModelAdapter",
    "FittedModel",
    "FitOptions",
    # Baselines
    "MeanBaselineAdapter",
    "MajorityBaselineAdapter",
    # Regression
    "LinearRegressionAdapter",
    "LassoAdapter",
    "DecisionTreeAdapter",
    "RandomForestAdapter",
    "BoostedTreeAdapter",
    # Classification
    "LogisticRegressionAdapter",
    "LinearDiscriminantAdapter",
    "QuadraticDiscriminantAdapter",
    "KNeighborsAdapter",
    "SupportVectorAdapter",
    # Registry
    "get_adapter",
    "default_adapters",
    "regression_adapters",
    "classification_adapters",
]
