"""Tree-based regression adapters.

Trees split on thresholds, so categorical predictors stay as integer codes
and nothing is scaled.

Key Classes:
    DecisionTreeAdapter - Single CART tree (variance reduction)
    RandomForestAdapter - Bagged trees on a seeded training subsample
    BoostedTreeAdapter - LightGBM gradient-boosted trees
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd
from lightgbm import LGBMRegressor
from sklearn.ensemble import RandomForestRegressor
from sklearn.pipeline import make_pipeline
from sklearn.tree import DecisionTreeRegressor

from tracklab.config import BOOSTED_TREE_PARAMS, FOREST_SUBSAMPLE
from tracklab.models.base import FitOptions, ModelAdapter, feature_names


def _importances(pipe) -> pd.Series:
    return pd.Series(
        pipe[-1].feature_importances_, index=feature_names(pipe)
    ).sort_values(ascending=False)


class DecisionTreeAdapter(ModelAdapter):
    """Regression tree; may end up using only a few predictors."""

    task = "regression"
    output = "continuous"
    encoding = "codes"
    scale = False

    def __init__(
        self,
        name: str = "decision_tree",
        max_depth: Optional[int] = 6,
        min_samples_leaf: int = 20,
        **kwargs,
    ):
        super().__init__(name, **kwargs)
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        tree = DecisionTreeRegressor(
            max_depth=self.max_depth,
            min_samples_leaf=self.min_samples_leaf,
            random_state=options.seed,
        )
        pipe = make_pipeline(self._preprocessor(list(X.columns)), tree)
        pipe.fit(X, y)

        names = feature_names(pipe)
        used = sorted({names[i] for i in pipe[-1].tree_.feature if i >= 0})
        return pipe, {
            "features_used": used,
            "depth": int(pipe[-1].get_depth()),
            "n_leaves": int(pipe[-1].get_n_leaves()),
        }


class RandomForestAdapter(ModelAdapter):
    """Random forest fit on a seeded subsample of the training rows."""

    task = "regression"
    output = "continuous"
    encoding = "codes"
    scale = False
    default_subsample = FOREST_SUBSAMPLE

    def __init__(self, name: str = "random_forest", n_estimators: int = 200, **kwargs):
        super().__init__(name, **kwargs)
        self.n_estimators = n_estimators

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        forest = RandomForestRegressor(
            n_estimators=self.n_estimators,
            random_state=options.seed,
            n_jobs=1,
        )
        pipe = make_pipeline(self._preprocessor(list(X.columns)), forest)
        pipe.fit(X, y)
        return pipe, {"importances": _importances(pipe)}


class BoostedTreeAdapter(ModelAdapter):
    """LightGBM regressor with the shared boosting parameters."""

    task = "regression"
    output = "continuous"
    encoding = "codes"
    scale = False

    def __init__(self, name: str = "boosted_tree", params: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(name, **kwargs)
        self.params = {**BOOSTED_TREE_PARAMS, **(params or {})}

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        gbm = LGBMRegressor(**self.params, random_state=options.seed, n_jobs=1)
        pipe = make_pipeline(self._preprocessor(list(X.columns)), gbm)
        pipe.fit(X, y)
        return pipe, {"importances": _importances(pipe)}
