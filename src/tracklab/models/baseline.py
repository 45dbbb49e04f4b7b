"""Baseline adapters for model comparison.

Simple reference predictors that serve as benchmarks for every model family.
If a model can't beat these, something is wrong.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd
from sklearn.dummy import DummyClassifier, DummyRegressor

from tracklab.models.base import FitOptions, ModelAdapter


class MeanBaselineAdapter(ModelAdapter):
    """Predicts the training mean for every row."""

    task = "regression"
    output = "continuous"

    def __init__(self, name: str = "mean_baseline", **kwargs):
        super().__init__(name, **kwargs)

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        model = DummyRegressor(strategy="mean").fit(X, y)
        return model, {"constant": float(model.constant_[0][0])}


class MajorityBaselineAdapter(ModelAdapter):
    """Predicts the most frequent training label for every row."""

    task = "classification"
    output = "label"

    def __init__(self, name: str = "majority_baseline", **kwargs):
        super().__init__(name, **kwargs)

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        model = DummyClassifier(strategy="most_frequent").fit(X, y)
        counts = np.bincount(y, minlength=2)
        return model, {"majority_label": int(np.argmax(counts)), "positive_rate": float(y.mean())}
