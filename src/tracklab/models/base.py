"""Base adapter interface for model families.

Every model family sits behind the same two calls:

    fitted = adapter.fit(train_rows, target_column, options)
    predictions = adapter.predict(fitted, rows)

The base class owns everything the families share: input checks, seeded
subsampling, FitError wrapping and predictor preprocessing. Subclasses
implement _fit() and, when they do not output estimator.predict(), _predict().

Categorical handling per family (mode, key, explicit):
    onehot - dummy columns, first level dropped (linear, lasso, logistic, SVC)
    codes  - integer codes used as-is (trees, forest, boosting, LDA/QDA, KNN)
Scaling only ever applies to continuous predictors.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from tracklab.config import CV_FOLDS, MIN_ROWS_PER_PREDICTOR, RANDOM_SEED
from tracklab.errors import FitError
from tracklab.features.definitions import CATEGORICAL_COLUMNS, TARGET_TASKS, Task
from tracklab.models.splits import subsample

logger = logging.getLogger(__name__)

Output = Literal["continuous", "label", "probability"]
Encoding = Literal["onehot", "codes"]


@dataclass(frozen=True)
class FitOptions:
    """Run-level fitting options shared by every adapter.

    Attributes:
        seed: Seed for subsampling, CV folds and stochastic estimators.
        cv_folds: Folds for cross-validated hyperparameter sweeps.
        subsample_size: Rows to fit on; None uses the adapter's default.
    """
    seed: int = RANDOM_SEED
    cv_folds: int = CV_FOLDS
    subsample_size: Optional[int] = None


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Opaque fitted parameters produced by one adapter.

    Attributes:
        adapter: Name of the adapter that produced it.
        target: Target column the model predicts.
        feature_cols: Predictor columns, in fit order.
        estimator: Fitted scikit-learn / LightGBM object.
        n_fit_rows: Rows the estimator was fit on (after subsampling).
        details: Read-only interpretability output (coefficients, importances,
            chosen hyperparameters).
    """
    adapter: str
    target: str
    feature_cols: Tuple[str, ...]
    estimator: Any
    n_fit_rows: int
    details: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def save(self, model_dir: Path, filename: Optional[str] = None) -> Path:
        """Save the fitted model with joblib.

        Returns:
            Path to the saved file
        """
        import joblib

        model_dir.mkdir(parents=True, exist_ok=True)
        path = model_dir / (filename or f"{self.adapter}.joblib")
        joblib.dump({
            "adapter": self.adapter,
            "target": self.target,
            "feature_cols": list(self.feature_cols),
            "estimator": self.estimator,
            "n_fit_rows": self.n_fit_rows,
            "details": dict(self.details),
        }, path)
        return path

    @classmethod
    def load(cls, path: Path) -> "FittedModel":
        """Load a model saved with save()."""
        import joblib

        data = joblib.load(path)
        return cls(
            adapter=data["adapter"],
            target=data["target"],
            feature_cols=tuple(data["feature_cols"]),
            estimator=data["estimator"],
            n_fit_rows=data["n_fit_rows"],
            details=data["details"],
        )


def make_preprocessor(
    feature_cols: Sequence[str],
    categorical: Sequence[str],
    encoding: Encoding,
    scale: bool,
) -> ColumnTransformer:
    """Column transformer for one model family.

    Args:
        feature_cols: Predictor columns in order
        categorical: Columns tagged categorical
        encoding: "onehot" for dummy columns, "codes" to keep integer codes
        scale: Standardize continuous predictors (never categorical ones)
    """
    continuous = [c for c in feature_cols if c not in categorical]
    cats = [c for c in feature_cols if c in categorical]

    transformers = [("continuous", StandardScaler() if scale else "passthrough", continuous)]
    if cats:
        if encoding == "onehot":
            encoder = OneHotEncoder(drop="first", handle_unknown="ignore", sparse_output=False)
            transformers.append(("categorical", encoder, cats))
        else:
            transformers.append(("categorical", "passthrough", cats))

    return ColumnTransformer(transformers, verbose_feature_names_out=False)


class ModelAdapter(ABC):
    """Abstract base class for model-family adapters.

    Class attributes set by each family:
        task: "regression" or "classification"
        output: "continuous", "label" or "probability"
        encoding: Categorical handling ("onehot" or "codes")
        scale: Standardize continuous predictors
        default_subsample: Rows to fit on by default (None = all)
    """

    task: Task = "regression"
    output: Output = "continuous"
    encoding: Encoding = "codes"
    scale: bool = False
    default_subsample: Optional[int] = None

    def __init__(self, name: str, categorical: Sequence[str] = tuple(CATEGORICAL_COLUMNS)):
        self.name = name
        self.categorical = tuple(categorical)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    # -------------------------------------------------------------------------
    # Public protocol
    # -------------------------------------------------------------------------

    def fit(
        self,
        train_rows: pd.DataFrame,
        target_column: str,
        options: Optional[FitOptions] = None,
    ) -> FittedModel:
        """Fit on training rows; every non-target column is a predictor.

        Args:
            train_rows: Training rows of the model dataset
            target_column: Column to predict
            options: Seed, CV folds and subsample size

        Returns:
            FittedModel owned by this adapter

        Raises:
            FitError: Missing target, too few rows, single-class target,
                task mismatch, or the solver rejected the data
        """
        options = options or FitOptions()
        rows = self._check_training_rows(train_rows, target_column)

        size = options.subsample_size or self.default_subsample
        if size is not None and size < len(rows):
            positions = subsample(np.arange(len(rows)), size, options.seed)
            rows = rows.iloc[positions]
            logger.info(f"{self.name}: fitting on subsample of {len(rows):,} rows")

        feature_cols = [c for c in rows.columns if c != target_column]
        self._check_row_count(rows, feature_cols, target_column)

        X = rows[feature_cols]
        y = rows[target_column].to_numpy()
        if self.task == "classification":
            y = y.astype(int)

        try:
            estimator, details = self._fit(X, y, options)
        except (ValueError, np.linalg.LinAlgError) as e:
            raise FitError(f"{self.name}: {e}") from e

        logger.info(f"{self.name}: fit on {len(rows):,} rows, {len(feature_cols)} predictors")
        return FittedModel(
            adapter=self.name,
            target=target_column,
            feature_cols=tuple(feature_cols),
            estimator=estimator,
            n_fit_rows=len(rows),
            details=details,
        )

    def predict(self, fitted: FittedModel, rows: pd.DataFrame) -> np.ndarray:
        """Raw predictions for `rows`.

        Continuous values for regression, hard labels or positive-class
        probabilities for classification (see `output`).

        Raises:
            ValueError: If the model came from another adapter or a
                predictor column is missing
        """
        if fitted.adapter != self.name:
            raise ValueError(
                f"{self.name} cannot predict with a model fitted by {fitted.adapter}"
            )
        missing = [c for c in fitted.feature_cols if c not in rows.columns]
        if missing:
            raise ValueError(f"Missing required feature columns: {missing}")

        X = rows[list(fitted.feature_cols)]
        return np.asarray(self._predict(fitted.estimator, X), dtype=float)

    # -------------------------------------------------------------------------
    # Family hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        """Fit the estimator; return (estimator, details)."""

    def _predict(self, estimator: Any, X: pd.DataFrame) -> np.ndarray:
        return estimator.predict(X)

    def _preprocessor(self, feature_cols: Sequence[str]) -> ColumnTransformer:
        return make_preprocessor(feature_cols, self.categorical, self.encoding, self.scale)

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _check_training_rows(self, train_rows: pd.DataFrame, target_column: str) -> pd.DataFrame:
        if target_column not in train_rows.columns:
            raise FitError(f"{self.name}: target column '{target_column}' not in training rows")

        expected_task = TARGET_TASKS.get(target_column)
        if expected_task is not None and expected_task != self.task:
            raise FitError(
                f"{self.name}: {self.task} adapter cannot model "
                f"{expected_task} target '{target_column}'"
            )
        return train_rows

    def _check_row_count(self, rows: pd.DataFrame, feature_cols: List[str], target_column: str) -> None:
        minimum = MIN_ROWS_PER_PREDICTOR * len(feature_cols)
        if len(rows) < minimum:
            raise FitError(
                f"{self.name}: {len(rows)} training rows, need at least {minimum} "
                f"({MIN_ROWS_PER_PREDICTOR} per predictor)"
            )
        if self.task == "classification" and rows[target_column].nunique() < 2:
            raise FitError(f"{self.name}: target '{target_column}' has a single class")


def feature_names(pipeline) -> List[str]:
    """Output column names of a fitted make_pipeline(preprocessor, model)."""
    return [str(n) for n in pipeline[:-1].get_feature_names_out()]


__all__ = [
    "ModelAdapter",
    "FittedModel",
    "FitOptions",
    "make_preprocessor",
    "feature_names",
]
