"""Discriminant-analysis classifiers.

Both model each class's predictor distribution as a Gaussian and output a
hard label. LDA shares one covariance matrix (linear boundary); QDA fits one
per class (quadratic boundary). Categorical predictors enter as codes.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd
from sklearn.discriminant_analysis import (
    LinearDiscriminantAnalysis,
    QuadraticDiscriminantAnalysis,
)
from sklearn.pipeline import make_pipeline

from tracklab.models.base import FitOptions, ModelAdapter, feature_names


class LinearDiscriminantAdapter(ModelAdapter):
    task = "classification"
    output = "label"
    encoding = "codes"
    scale = False

    def __init__(self, name: str = "lda", **kwargs):
        super().__init__(name, **kwargs)

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        pipe = make_pipeline(self._preprocessor(list(X.columns)), LinearDiscriminantAnalysis())
        pipe.fit(X, y)
        model = pipe[-1]
        return pipe, {
            "priors": dict(zip(model.classes_.tolist(), model.priors_.tolist())),
            "coefficients": pd.Series(model.coef_[0], index=feature_names(pipe)),
        }


class QuadraticDiscriminantAdapter(ModelAdapter):
    task = "classification"
    output = "label"
    encoding = "codes"
    scale = False

    def __init__(self, name: str = "qda", reg_param: float = 0.0, **kwargs):
        super().__init__(name, **kwargs)
        self.reg_param = reg_param

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        qda = QuadraticDiscriminantAnalysis(reg_param=self.reg_param)
        pipe = make_pipeline(self._preprocessor(list(X.columns)), qda)
        pipe.fit(X, y)
        model = pipe[-1]
        return pipe, {
            "priors": dict(zip(model.classes_.tolist(), model.priors_.tolist())),
            "reg_param": self.reg_param,
        }
