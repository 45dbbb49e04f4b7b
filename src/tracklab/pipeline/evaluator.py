"""Model evaluation for regression and classification outputs.

Provides evaluation decoupled from fitting: the Evaluator only sees true
values and raw predictions, so the same predictions can be re-scored (e.g.
at another threshold) without refitting.

Key Classes:
    Evaluator - Clamps/thresholds predictions and computes metrics
    EvaluationResult - Immutable per-algorithm outcome (ok or failed)
    ContingencyTable - 2x2 true-label x predicted-label counts
    EvaluationOptions - Threshold and regression target range

Metrics Explained:
    MSE: Mean squared error after clamping into [0, 100] (lower is better)
    Accuracy: Share of correct labels (higher is better)
    Type I error: False-positive rate, FP / (FP + TN)
    Type II error: False-negative rate, FN / (FN + TP)

Usage:
    from tracklab.pipeline.evaluator import Evaluator

    evaluator = Evaluator()
    result = evaluator.evaluate("regression", y_test, y_pred, algorithm="lasso")
    sweep = evaluator.sweep_thresholds(y_test, probs, [0.25, 0.5])
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix, mean_absolute_error, mean_squared_error

from tracklab.config import DEFAULT_THRESHOLD, POPULARITY_RANGE
from tracklab.errors import InvalidRangeError, PredictionRangeError
from tracklab.features.definitions import Task

Status = Literal["ok", "failed"]

PRIMARY_METRIC: Dict[str, str] = {
    "regression": "mse",
    "classification": "accuracy",
}


@dataclass(frozen=True)
class EvaluationOptions:
    """Scoring options.

    Attributes:
        threshold: Probability cut-off; a row is positive when prob > threshold.
        value_range: Valid (low, high) domain of the regression target.
    """
    threshold: float = DEFAULT_THRESHOLD
    value_range: Tuple[float, float] = POPULARITY_RANGE

    def __post_init__(self) -> None:
        if not 0.0 < self.threshold < 1.0:
            raise InvalidRangeError(f"threshold must be in (0, 1), got {self.threshold}")
        lo, hi = self.value_range
        if not lo < hi:
            raise InvalidRangeError(f"value_range must satisfy low < high, got {self.value_range}")


@dataclass(frozen=True)
class ContingencyTable:
    """2x2 counts of true label (rows) against predicted label (columns)."""

    tn: int
    fp: int
    fn: int
    tp: int

    @classmethod
    def from_labels(cls, y_true: np.ndarray, y_pred: np.ndarray) -> "ContingencyTable":
        tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
        return cls(tn=int(tn), fp=int(fp), fn=int(fn), tp=int(tp))

    @property
    def n(self) -> int:
        return self.tn + self.fp + self.fn + self.tp

    @property
    def accuracy(self) -> float:
        return (self.tp + self.tn) / self.n if self.n else math.nan

    @property
    def type_i_error(self) -> float:
        """False-positive rate among true negatives."""
        negatives = self.tn + self.fp
        return self.fp / negatives if negatives else math.nan

    @property
    def type_ii_error(self) -> float:
        """False-negative rate among true positives."""
        positives = self.fn + self.tp
        return self.fn / positives if positives else math.nan

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [[self.tn, self.fp], [self.fn, self.tp]],
            index=pd.Index([0, 1], name="true"),
            columns=pd.Index([0, 1], name="predicted"),
        )

    def to_dict(self) -> Dict[str, int]:
        return {"tn": self.tn, "fp": self.fp, "fn": self.fn, "tp": self.tp}


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one algorithm on one task.

    Attributes:
        algorithm: Adapter name.
        task: "regression" or "classification".
        status: "ok", or "failed" when the adapter could not fit/predict.
        metrics: Read-only metric values (empty when failed).
        contingency: Classification counts (None for regression/failed).
        threshold: Cut-off applied to probabilities (None for labels).
        error: Failure message (None when ok).
    """
    algorithm: str
    task: Task
    status: Status = "ok"
    metrics: Mapping[str, float] = field(default_factory=dict)
    contingency: Optional[ContingencyTable] = None
    threshold: Optional[float] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    @property
    def succeeded(self) -> bool:
        return self.status == "ok"

    @property
    def primary_metric(self) -> str:
        return PRIMARY_METRIC[self.task]

    @property
    def score(self) -> float:
        """Value of the primary metric (NaN when failed)."""
        return self.metrics.get(self.primary_metric, math.nan)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "algorithm": self.algorithm,
            "task": self.task,
            "status": self.status,
            "metrics": {
                k: None if math.isnan(v) else round(v, 4) for k, v in self.metrics.items()
            },
            "contingency": self.contingency.to_dict() if self.contingency else None,
            "threshold": self.threshold,
            "error": self.error,
        }


class Evaluator:
    """Score raw predictions against true values.

    Attributes:
        options: Default EvaluationOptions (threshold, target range)
    """

    def __init__(self, options: Optional[EvaluationOptions] = None):
        self.options = options or EvaluationOptions()

    def evaluate(
        self,
        task_type: Task,
        true_values: Sequence[float],
        predicted_values: Sequence[float],
        options: Optional[EvaluationOptions] = None,
        algorithm: str = "model",
        probabilities: Optional[bool] = None,
    ) -> EvaluationResult:
        """Evaluate one set of predictions.

        Args:
            task_type: "regression" or "classification"
            true_values: Observed target values
            predicted_values: Raw adapter output (continuous, labels or probabilities)
            options: Overrides the evaluator's default options
            algorithm: Name recorded on the result
            probabilities: Classification only. True forces thresholding, False
                forces hard labels, None infers (all 0/1 values are labels)

        Returns:
            EvaluationResult with status "ok"

        Raises:
            ValueError: Length mismatch, non-finite values, or labels outside {0, 1}
            PredictionRangeError: A clamped prediction is still out of range
        """
        options = options or self.options
        y_true = np.asarray(true_values, dtype=float)
        y_pred = np.asarray(predicted_values, dtype=float)

        if y_true.shape != y_pred.shape:
            raise ValueError(f"Length mismatch: {len(y_true)} true values, {len(y_pred)} predictions")
        if len(y_true) == 0:
            raise ValueError("Nothing to evaluate: no rows")
        if not np.all(np.isfinite(y_pred)):
            raise ValueError(f"{algorithm}: non-finite predictions")

        if task_type == "regression":
            return self._evaluate_regression(y_true, y_pred, options, algorithm)
        if task_type == "classification":
            return self._evaluate_classification(y_true, y_pred, options, algorithm, probabilities)
        raise ValueError(f"Unknown task type: {task_type}")

    def sweep_thresholds(
        self,
        true_values: Sequence[float],
        probabilities: Sequence[float],
        thresholds: Sequence[float],
        algorithm: str = "model",
    ) -> List[EvaluationResult]:
        """Re-score the same probabilities at several thresholds (no refit)."""
        return [
            self.evaluate(
                "classification",
                true_values,
                probabilities,
                replace(self.options, threshold=t),
                algorithm=algorithm,
                probabilities=True,
            )
            for t in thresholds
        ]

    def select_threshold(
        self,
        true_values: Sequence[float],
        probabilities: Sequence[float],
        thresholds: Sequence[float],
    ) -> float:
        """Threshold with the best accuracy on a validation set.

        Ties go to the threshold closest to the default cut-off. Pass
        validation data only; selecting on the test set leaks it.
        """
        results = self.sweep_thresholds(true_values, probabilities, thresholds)
        best = max(
            results,
            key=lambda r: (r.metrics["accuracy"], -abs(r.threshold - DEFAULT_THRESHOLD)),
        )
        return best.threshold

    @staticmethod
    def failed(algorithm: str, task_type: Task, error: str) -> EvaluationResult:
        """Result recording an adapter that could not produce predictions."""
        return EvaluationResult(algorithm=algorithm, task=task_type, status="failed", error=error)

    # -------------------------------------------------------------------------
    # Task-specific scoring
    # -------------------------------------------------------------------------

    def _evaluate_regression(
        self,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        options: EvaluationOptions,
        algorithm: str,
    ) -> EvaluationResult:
        lo, hi = options.value_range
        clamped = np.clip(y_pred, lo, hi)
        if np.any(clamped < lo) or np.any(clamped > hi):
            raise PredictionRangeError(f"{algorithm}: clamped predictions outside [{lo}, {hi}]")

        mse = float(mean_squared_error(y_true, clamped))
        metrics = {
            "mse": mse,
            "rmse": math.sqrt(mse),
            "mae": float(mean_absolute_error(y_true, clamped)),
            "n_clamped": float(np.sum((y_pred < lo) | (y_pred > hi))),
            "n": float(len(y_true)),
        }
        return EvaluationResult(algorithm=algorithm, task="regression", metrics=metrics)

    def _evaluate_classification(
        self,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        options: EvaluationOptions,
        algorithm: str,
        probabilities: Optional[bool],
    ) -> EvaluationResult:
        if not np.isin(y_true, [0, 1]).all():
            raise ValueError(f"{algorithm}: true labels must be 0/1")

        if probabilities is None:
            probabilities = not np.isin(y_pred, [0, 1]).all()

        threshold = None
        if not probabilities:
            if not np.isin(y_pred, [0, 1]).all():
                raise ValueError(f"{algorithm}: hard labels must be 0/1")
            labels = y_pred.astype(int)
        else:
            if np.any(y_pred < 0) or np.any(y_pred > 1):
                raise ValueError(f"{algorithm}: probabilities must lie in [0, 1]")
            threshold = options.threshold
            labels = (y_pred > threshold).astype(int)

        table = ContingencyTable.from_labels(y_true.astype(int), labels)
        metrics = {
            "accuracy": table.accuracy,
            "type_i_error": table.type_i_error,
            "type_ii_error": table.type_ii_error,
            "n": float(table.n),
        }
        return EvaluationResult(
            algorithm=algorithm,
            task="classification",
            metrics=metrics,
            contingency=table,
            threshold=threshold,
        )


def evaluate(
    task_type: Task,
    true_values: Sequence[float],
    predicted_values: Sequence[float],
    options: Optional[EvaluationOptions] = None,
    algorithm: str = "model",
    probabilities: Optional[bool] = None,
) -> EvaluationResult:
    """Module-level wrapper for Evaluator().evaluate()."""
    return Evaluator(options).evaluate(
        task_type, true_values, predicted_values, algorithm=algorithm, probabilities=probabilities
    )
