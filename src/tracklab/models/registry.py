"""Adapter registry.

Provides the default adapter suite per task and lookup by name. Each call
builds fresh adapter instances, so no fitted state is shared between runs.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from tracklab.features.definitions import Task, task_for_target
from tracklab.models.base import ModelAdapter
from tracklab.models.baseline import MajorityBaselineAdapter, MeanBaselineAdapter
from tracklab.models.discriminant import LinearDiscriminantAdapter, QuadraticDiscriminantAdapter
from tracklab.models.linear import LassoAdapter, LinearRegressionAdapter, LogisticRegressionAdapter
from tracklab.models.neighbors import KNeighborsAdapter
from tracklab.models.svm import SupportVectorAdapter
from tracklab.models.trees import BoostedTreeAdapter, DecisionTreeAdapter, RandomForestAdapter


ADAPTERS: Dict[str, Callable[[], ModelAdapter]] = {
    # Regression
    "mean_baseline": MeanBaselineAdapter,
    "linear_regression": LinearRegressionAdapter,
    "lasso": LassoAdapter,
    "decision_tree": DecisionTreeAdapter,
    "random_forest": RandomForestAdapter,
    "boosted_tree": BoostedTreeAdapter,
    # Classification
    "majority_baseline": MajorityBaselineAdapter,
    "logistic_regression": LogisticRegressionAdapter,
    "lda": LinearDiscriminantAdapter,
    "qda": QuadraticDiscriminantAdapter,
    "knn": KNeighborsAdapter,
    "svm_linear": lambda: SupportVectorAdapter(kernel="linear"),
    "svm_poly": lambda: SupportVectorAdapter(kernel="poly"),
}


def get_adapter(name: str) -> ModelAdapter:
    """Build a fresh adapter by registry name.

    Raises:
        ValueError: If name is unknown
    """
    if name not in ADAPTERS:
        raise ValueError(
            f"Unknown adapter: {name}. "
            f"Must be one of: {list(ADAPTERS.keys())}"
        )
    return ADAPTERS[name]()


def adapters_for_task(task: Task) -> List[ModelAdapter]:
    """Fresh instances of every registered adapter for a task."""
    adapters = [factory() for factory in ADAPTERS.values()]
    return [a for a in adapters if a.task == task]


def regression_adapters() -> List[ModelAdapter]:
    return adapters_for_task("regression")


def classification_adapters() -> List[ModelAdapter]:
    return adapters_for_task("classification")


def default_adapters(target: str) -> List[ModelAdapter]:
    """Default suite for a target column (popularity or explicit)."""
    return adapters_for_task(task_for_target(target))


__all__ = [
    "ADAPTERS",
    "get_adapter",
    "adapters_for_task",
    "regression_adapters",
    "classification_adapters",
    "default_adapters",
]
