"""Support vector classifiers (linear and polynomial kernels).

Hyperparameters are chosen by a single cross-validated grid search on a
seeded subsample of the training rows: cost for the linear kernel, cost and
gamma for the polynomial kernel. Kernel SVMs scale badly with row count,
so the subsample trades some accuracy for runtime.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.pipeline import make_pipeline
from sklearn.svm import SVC

from tracklab.config import SVM_LINEAR_GRID, SVM_POLY_GRID, SVM_SUBSAMPLE
from tracklab.models.base import FitOptions, ModelAdapter

Kernel = Literal["linear", "poly"]


class SupportVectorAdapter(ModelAdapter):
    """SVC with grid-searched cost (and gamma for the polynomial kernel)."""

    task = "classification"
    output = "label"
    encoding = "onehot"
    scale = True
    default_subsample = SVM_SUBSAMPLE

    def __init__(
        self,
        kernel: Kernel = "linear",
        name: Optional[str] = None,
        degree: int = 3,
        param_grid: Optional[Dict[str, List[float]]] = None,
        **kwargs,
    ):
        if kernel not in ("linear", "poly"):
            raise ValueError(f"Unknown kernel: {kernel}. Must be one of: ['linear', 'poly']")
        super().__init__(name or f"svm_{kernel}", **kwargs)
        self.kernel = kernel
        self.degree = degree
        self.param_grid = param_grid or (SVM_LINEAR_GRID if kernel == "linear" else SVM_POLY_GRID)

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        svc = SVC(kernel=self.kernel, degree=self.degree, max_iter=200_000)
        pipe = make_pipeline(self._preprocessor(list(X.columns)), svc)

        grid = {f"svc__{k}": v for k, v in self.param_grid.items()}
        cv = StratifiedKFold(n_splits=options.cv_folds, shuffle=True, random_state=options.seed)
        search = GridSearchCV(pipe, grid, cv=cv, scoring="accuracy")
        search.fit(X, y)

        best = {k.split("__", 1)[1]: v for k, v in search.best_params_.items()}
        return search.best_estimator_, {
            "kernel": self.kernel,
            "best_params": best,
            "cv_accuracy": float(search.best_score_),
        }
