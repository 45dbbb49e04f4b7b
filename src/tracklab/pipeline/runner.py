"""Model comparison runner and end-to-end pipeline.

ComparisonRunner fits every adapter on the same split, scores each on the
same held-out rows and returns results ranked by the task's primary metric.
A failing adapter is recorded as failed and the run continues.

ComparisonPipeline orchestrates the whole workflow:
1. Data loading (TrackReader)
2. Feature derivation (FeatureDeriver)
3. Train/test split (DatasetSplitter)
4. Comparison per target (ComparisonRunner)
5. Report saving

Usage:
    from tracklab.pipeline import ComparisonPipeline

    # Full pipeline
    ComparisonPipeline.run()

    # Or step by step
    pipeline = ComparisonPipeline(RunConfig(seed=7))
    pipeline.load_data()
    pipeline.build_features()
    pipeline.split()
    pipeline.compare("popularity")
    pipeline.save_report()
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from tracklab.config import REPORTS_DIR, RunConfig, THRESHOLD_GRID, VALIDATION_FRACTION
from tracklab.data import TrackReader
from tracklab.errors import FitError, PredictionRangeError, SchemaError
from tracklab.features import FeatureDeriver, ModelDataset
from tracklab.features.definitions import EXPLICIT, POPULARITY, TARGET_TASKS
from tracklab.models import DatasetSplitter, FitOptions, FittedModel, ModelAdapter, Split
from tracklab.models.registry import default_adapters
from tracklab.pipeline.evaluator import EvaluationOptions, EvaluationResult, Evaluator
from tracklab.pipeline.report import print_comparison, save_report

logger = logging.getLogger(__name__)


def rank_results(results: Sequence[EvaluationResult]) -> List[EvaluationResult]:
    """Successful results best-first, then failures in their original order.

    Regression ranks by ascending MSE, classification by descending accuracy.
    """
    ok = [r for r in results if r.succeeded]
    failed = [r for r in results if not r.succeeded]
    ok.sort(key=lambda r: r.score if r.task == "regression" else -r.score)
    return ok + failed


class ComparisonRunner:
    """Run a set of adapters over one split and rank the results.

    Raw test predictions and fitted models are kept per adapter, so
    classification results can be re-scored at other thresholds without
    refitting.

    Attributes:
        fit_options: Seed/CV/subsample options passed to every adapter
        evaluator: Evaluator holding the default threshold and target range
        tune_thresholds: Pick probability thresholds on a validation carve-out
        threshold_grid: Candidate thresholds for tuning
        validation_fraction: Share of train rows held out for tuning
    """

    def __init__(
        self,
        fit_options: Optional[FitOptions] = None,
        evaluation: Optional[EvaluationOptions] = None,
        tune_thresholds: bool = False,
        threshold_grid: Sequence[float] = THRESHOLD_GRID,
        validation_fraction: float = VALIDATION_FRACTION,
    ):
        self.fit_options = fit_options or FitOptions()
        self.evaluator = Evaluator(evaluation)
        self.tune_thresholds = tune_thresholds
        self.threshold_grid = list(threshold_grid)
        self.validation_fraction = validation_fraction

        # State from the last run
        self.task: Optional[str] = None
        self.y_test: Optional[np.ndarray] = None
        self.fitted: Dict[str, FittedModel] = {}
        self.predictions: Dict[str, np.ndarray] = {}
        self.outputs: Dict[str, str] = {}
        self.results: List[EvaluationResult] = []

    def run(
        self,
        dataset: ModelDataset,
        split: Split,
        adapters: Sequence[ModelAdapter],
        target_column: str,
    ) -> List[EvaluationResult]:
        """Fit, predict and evaluate every adapter on the same split.

        Args:
            dataset: Model dataset
            split: Train/test partition shared by every adapter
            adapters: Adapters to compare (names must be unique)
            target_column: "popularity" (regression) or "explicit" (classification)

        Returns:
            One EvaluationResult per adapter, ranked; failures last

        Raises:
            SchemaError: If the target is not a supported column of the dataset
            ValueError: If adapter names are not unique
            PredictionRangeError: If regression clamping is broken
        """
        if target_column not in TARGET_TASKS or target_column not in dataset.columns:
            raise SchemaError(target_column, "not a supported target column of the dataset")
        names = [a.name for a in adapters]
        if len(set(names)) != len(names):
            raise ValueError(f"Adapter names must be unique, got {names}")

        self.task = TARGET_TASKS[target_column]
        self.fitted, self.predictions, self.outputs = {}, {}, {}

        train_rows = dataset.rows(split.train)
        test_rows = dataset.rows(split.test)
        self.y_test = test_rows[target_column].to_numpy()

        logger.info(
            f"Comparing {len(adapters)} adapters on '{target_column}' "
            f"({len(train_rows):,} train / {len(test_rows):,} test rows)"
        )

        results = [
            self._run_one(adapter, dataset, split, train_rows, test_rows, target_column)
            for adapter in adapters
        ]
        self.results = rank_results(results)
        return self.results

    def reevaluate(self, algorithm: str, threshold: float) -> EvaluationResult:
        """Re-score a classifier's stored test probabilities at a new threshold.

        Raises:
            KeyError: If the algorithm has no stored predictions (unknown or failed)
            ValueError: If the algorithm outputs hard labels
        """
        if algorithm not in self.predictions:
            raise KeyError(f"No stored predictions for '{algorithm}'")
        if self.outputs[algorithm] != "probability":
            raise ValueError(f"{algorithm} outputs {self.outputs[algorithm]} predictions, not probabilities")

        options = replace(self.evaluator.options, threshold=threshold)
        return self.evaluator.evaluate(
            "classification",
            self.y_test,
            self.predictions[algorithm],
            options,
            algorithm=algorithm,
            probabilities=True,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _run_one(
        self,
        adapter: ModelAdapter,
        dataset: ModelDataset,
        split: Split,
        train_rows: pd.DataFrame,
        test_rows: pd.DataFrame,
        target_column: str,
    ) -> EvaluationResult:
        try:
            if adapter.task != self.task:
                raise FitError(f"{adapter.name}: {adapter.task} adapter in a {self.task} run")

            fitted = adapter.fit(train_rows, target_column, self.fit_options)
            predictions = adapter.predict(fitted, test_rows)

            options = self.evaluator.options
            is_probability = adapter.output == "probability"
            if is_probability and self.tune_thresholds:
                threshold = self._tune_threshold(adapter, dataset, split, target_column)
                options = replace(options, threshold=threshold)

            result = self.evaluator.evaluate(
                self.task,
                self.y_test,
                predictions,
                options,
                algorithm=adapter.name,
                probabilities=is_probability if self.task == "classification" else None,
            )
        except PredictionRangeError:
            raise
        except FitError as e:
            logger.warning(f"{adapter.name} failed to fit: {e}")
            return Evaluator.failed(adapter.name, self.task, str(e))
        except Exception as e:
            logger.exception(f"{adapter.name} failed")
            return Evaluator.failed(adapter.name, self.task, f"{type(e).__name__}: {e}")

        self.fitted[adapter.name] = fitted
        self.predictions[adapter.name] = predictions
        self.outputs[adapter.name] = adapter.output
        logger.info(f"{adapter.name}: {result.primary_metric}={result.score:.4f}")
        return result

    def _tune_threshold(
        self,
        adapter: ModelAdapter,
        dataset: ModelDataset,
        split: Split,
        target_column: str,
    ) -> float:
        """Select a threshold on a validation carve-out of the train split."""
        carve = split.carve_validation(self.validation_fraction, self.fit_options.seed)
        fitted = adapter.fit(dataset.rows(carve.train), target_column, self.fit_options)
        val_rows = dataset.rows(carve.test)
        probs = adapter.predict(fitted, val_rows)
        threshold = self.evaluator.select_threshold(
            val_rows[target_column].to_numpy(), probs, self.threshold_grid
        )
        logger.info(f"{adapter.name}: validation-selected threshold {threshold}")
        return threshold


class ComparisonPipeline:
    """End-to-end track model comparison."""

    def __init__(self, config: Optional[RunConfig] = None):
        self.config = config or RunConfig()

        # State
        self.raw_df: Optional[pd.DataFrame] = None
        self.dataset: Optional[ModelDataset] = None
        self.data_split: Optional[Split] = None
        self.runners: Dict[str, ComparisonRunner] = {}
        self.results: Dict[str, List[EvaluationResult]] = {}

    def load_data(self, raw_df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        """Step 1: Load raw tracks (from the configured CSV unless given)."""
        if raw_df is None:
            raw_df = TrackReader(str(self.config.resolved_data_path)).read()
        self.raw_df = raw_df
        return self.raw_df

    def build_features(self) -> ModelDataset:
        """Step 2: Validate raw tracks and derive the model dataset."""
        if self.raw_df is None:
            raise ValueError("Call load_data() first")
        self.dataset = FeatureDeriver().derive(self.raw_df)
        return self.dataset

    def split(self) -> Split:
        """Step 3: Seeded train/test split, shared by every comparison."""
        if self.dataset is None:
            raise ValueError("Call build_features() first")
        splitter = DatasetSplitter(self.config.train_fraction, self.config.seed)
        self.data_split = splitter.split(self.dataset)
        return self.data_split

    def compare(
        self,
        target: str,
        adapters: Optional[Sequence[ModelAdapter]] = None,
    ) -> List[EvaluationResult]:
        """Step 4: Compare adapters on one target (default suite if None)."""
        if self.data_split is None:
            raise ValueError("Call split() first")

        runner = ComparisonRunner(
            fit_options=FitOptions(seed=self.config.seed),
            evaluation=EvaluationOptions(threshold=self.config.threshold),
            tune_thresholds=self.config.tune_thresholds,
            threshold_grid=self.config.threshold_grid,
            validation_fraction=self.config.validation_fraction,
        )
        adapters = list(adapters) if adapters is not None else default_adapters(target)
        self.results[target] = runner.run(self.dataset, self.data_split, adapters, target)
        self.runners[target] = runner
        return self.results[target]

    def save_report(self, out_path: Optional[Path] = None) -> Path:
        """Step 5: Save all comparison results as JSON."""
        out_path = Path(out_path) if out_path else REPORTS_DIR / "comparison.json"
        meta = {
            "seed": self.config.seed,
            "train_fraction": self.config.train_fraction,
            "threshold": self.config.threshold,
            "tune_thresholds": self.config.tune_thresholds,
        }
        if self.data_split is not None:
            meta.update(self.data_split.summary)
        return save_report(self.results, out_path, meta=meta)

    @classmethod
    def run(
        cls,
        config: Optional[RunConfig] = None,
        targets: Sequence[str] = (POPULARITY, EXPLICIT),
        out_path: Optional[Path] = None,
    ) -> "ComparisonPipeline":
        """Run full pipeline end-to-end."""
        pipeline = cls(config)
        pipeline.load_data()
        pipeline.build_features()
        pipeline.split()
        for target in targets:
            print_comparison(pipeline.compare(target), title=target)
        pipeline.save_report(out_path)
        return pipeline
