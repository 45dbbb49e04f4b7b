"""k-nearest-neighbors classifier.

Raw scales differ by orders of magnitude (duration_ms vs. valence), which
lets the widest column dominate Euclidean distance. Standardizing continuous
predictors is on by default; categorical codes are never standardized.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import make_pipeline

from tracklab.models.base import FitOptions, ModelAdapter


class KNeighborsAdapter(ModelAdapter):
    """Majority vote among the k nearest training rows."""

    task = "classification"
    output = "label"
    encoding = "codes"

    def __init__(
        self,
        name: str = "knn",
        n_neighbors: int = 5,
        standardize: bool = True,
        subsample_size: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(name, **kwargs)
        self.n_neighbors = n_neighbors
        self.scale = standardize
        self.default_subsample = subsample_size

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        knn = KNeighborsClassifier(n_neighbors=self.n_neighbors)
        pipe = make_pipeline(self._preprocessor(list(X.columns)), knn)
        pipe.fit(X, y)
        return pipe, {"n_neighbors": self.n_neighbors, "standardized": self.scale}
