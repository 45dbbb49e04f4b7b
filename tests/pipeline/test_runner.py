"""Tests for ComparisonRunner and ComparisonPipeline."""

import json

import numpy as np
import pytest

from tracklab.config import RunConfig
from tracklab.errors import SchemaError
from tracklab.models import (
    DecisionTreeAdapter,
    KNeighborsAdapter,
    LinearRegressionAdapter,
    LogisticRegressionAdapter,
    MajorityBaselineAdapter,
    MeanBaselineAdapter,
)
from tracklab.models.base import ModelAdapter
from tracklab.pipeline import ComparisonPipeline, ComparisonRunner, Evaluator, rank_results


class BrokenSolverAdapter(ModelAdapter):
    """Regression adapter whose solver always rejects the data."""

    task = "regression"

    def _fit(self, X, y, options):
        raise ValueError("solver diverged")


class WrongTargetAdapter(LinearRegressionAdapter):
    """OLS adapter that asks for a target the dataset does not have."""

    def fit(self, train_rows, target_column, options=None):
        return super().fit(train_rows, "chart_position", options)


class CrashingAdapter(ModelAdapter):
    """Regression adapter that fails with an unexpected error."""

    task = "regression"

    def _fit(self, X, y, options):
        raise RuntimeError("out of memory")


class TestComparisonRunner:
    """Tests for ComparisonRunner.run()."""

    def test_failing_adapter_does_not_abort_run(self, model_dataset, data_split):
        runner = ComparisonRunner()
        results = runner.run(
            model_dataset,
            data_split,
            [BrokenSolverAdapter("broken"), LinearRegressionAdapter()],
            "popularity",
        )

        assert len(results) == 2
        assert [r.algorithm for r in results] == ["linear_regression", "broken"]
        assert results[0].succeeded
        assert not results[1].succeeded
        assert "solver diverged" in results[1].error

    def test_missing_target_adapter_recorded_as_failed(self, model_dataset, data_split):
        results = ComparisonRunner().run(
            model_dataset,
            data_split,
            [WrongTargetAdapter("wrong_target"), MeanBaselineAdapter()],
            "popularity",
        )

        assert len(results) == 2
        assert results[0].algorithm == "mean_baseline" and results[0].succeeded
        assert results[1].status == "failed"
        assert "chart_position" in results[1].error

    def test_unexpected_exception_recorded(self, model_dataset, data_split):
        results = ComparisonRunner().run(
            model_dataset, data_split, [CrashingAdapter("crash"), MeanBaselineAdapter()], "popularity"
        )
        failed = [r for r in results if not r.succeeded]

        assert len(failed) == 1
        assert failed[0].error == "RuntimeError: out of memory"

    def test_regression_ranked_by_mse(self, model_dataset, data_split):
        results = ComparisonRunner().run(
            model_dataset,
            data_split,
            [MeanBaselineAdapter(), DecisionTreeAdapter(), LinearRegressionAdapter()],
            "popularity",
        )
        scores = [r.score for r in results]

        assert scores == sorted(scores)
        assert results[0].algorithm == "linear_regression"
        assert results[-1].algorithm == "mean_baseline"

    def test_classification_ranked_by_accuracy(self, model_dataset, data_split):
        results = ComparisonRunner().run(
            model_dataset,
            data_split,
            [MajorityBaselineAdapter(), LogisticRegressionAdapter(), KNeighborsAdapter()],
            "explicit",
        )
        scores = [r.score for r in results]

        assert scores == sorted(scores, reverse=True)
        assert all(r.contingency.n == 60 for r in results)

    def test_adapters_share_the_split(self, model_dataset, data_split):
        runner = ComparisonRunner()
        runner.run(model_dataset, data_split, [MeanBaselineAdapter(), LinearRegressionAdapter()], "popularity")

        expected = model_dataset.rows(data_split.test)["popularity"].to_numpy()
        np.testing.assert_array_equal(runner.y_test, expected)
        assert all(len(p) == len(data_split.test) for p in runner.predictions.values())

    def test_task_mismatched_adapter_fails_alone(self, model_dataset, data_split):
        results = ComparisonRunner().run(
            model_dataset,
            data_split,
            [LogisticRegressionAdapter(), MeanBaselineAdapter()],
            "popularity",
        )
        by_name = {r.algorithm: r for r in results}

        assert by_name["mean_baseline"].succeeded
        assert not by_name["logistic_regression"].succeeded

    def test_unsupported_target(self, model_dataset, data_split):
        with pytest.raises(SchemaError, match="tempo"):
            ComparisonRunner().run(model_dataset, data_split, [MeanBaselineAdapter()], "tempo")

    def test_duplicate_adapter_names(self, model_dataset, data_split):
        with pytest.raises(ValueError, match="unique"):
            ComparisonRunner().run(
                model_dataset, data_split, [MeanBaselineAdapter(), MeanBaselineAdapter()], "popularity"
            )

    def test_same_seed_same_results(self, model_dataset, data_split):
        a = ComparisonRunner().run(model_dataset, data_split, [DecisionTreeAdapter()], "popularity")
        b = ComparisonRunner().run(model_dataset, data_split, [DecisionTreeAdapter()], "popularity")
        assert a[0].score == b[0].score


class TestReevaluate:
    """Tests for re-scoring stored probabilities."""

    @pytest.fixture
    def runner(self, model_dataset, data_split):
        runner = ComparisonRunner()
        runner.run(
            model_dataset,
            data_split,
            [LogisticRegressionAdapter(), MajorityBaselineAdapter()],
            "explicit",
        )
        return runner

    def test_reevaluate_uses_stored_predictions(self, runner):
        result = runner.reevaluate("logistic_regression", 0.25)
        expected = Evaluator().sweep_thresholds(
            runner.y_test, runner.predictions["logistic_regression"], [0.25]
        )[0]

        assert result.threshold == 0.25
        assert result.contingency == expected.contingency

    def test_lower_threshold_raises_type_i(self, runner):
        low = runner.reevaluate("logistic_regression", 0.25)
        default = runner.reevaluate("logistic_regression", 0.5)

        assert low.metrics["type_i_error"] >= default.metrics["type_i_error"]
        assert low.metrics["type_ii_error"] <= default.metrics["type_ii_error"]

    def test_reevaluate_unknown(self, runner):
        with pytest.raises(KeyError):
            runner.reevaluate("svm_poly", 0.5)

    def test_reevaluate_label_output(self, runner):
        with pytest.raises(ValueError, match="label"):
            runner.reevaluate("majority_baseline", 0.5)


class TestThresholdTuning:
    """Tests for validation-selected thresholds."""

    def test_tuned_threshold_comes_from_grid(self, model_dataset, data_split):
        grid = [0.3, 0.4, 0.5, 0.6]
        runner = ComparisonRunner(tune_thresholds=True, threshold_grid=grid)
        results = runner.run(
            model_dataset,
            data_split,
            [LogisticRegressionAdapter(), MajorityBaselineAdapter()],
            "explicit",
        )
        by_name = {r.algorithm: r for r in results}

        assert by_name["logistic_regression"].threshold in grid
        assert by_name["majority_baseline"].threshold is None


class TestRankResults:
    def test_failures_last(self):
        ok_bad = Evaluator().evaluate("regression", [0, 0], [5, 5], algorithm="worse")
        ok_good = Evaluator().evaluate("regression", [0, 0], [1, 1], algorithm="better")
        failed = Evaluator.failed("broken", "regression", "boom")

        ranked = rank_results([failed, ok_bad, ok_good])
        assert [r.algorithm for r in ranked] == ["better", "worse", "broken"]


class TestComparisonPipeline:
    """Tests for the end-to-end pipeline."""

    def test_steps_in_order(self, raw_tracks, tmp_path):
        pipeline = ComparisonPipeline(RunConfig(seed=3))

        with pytest.raises(ValueError, match="load_data"):
            pipeline.build_features()

        pipeline.load_data(raw_tracks)
        pipeline.build_features()
        pipeline.split()
        pipeline.compare("popularity", [MeanBaselineAdapter(), LinearRegressionAdapter()])
        pipeline.compare("explicit", [MajorityBaselineAdapter(), LogisticRegressionAdapter()])
        path = pipeline.save_report(tmp_path / "report.json")

        payload = json.loads(path.read_text())
        assert payload["meta"]["seed"] == 3
        assert payload["meta"]["train_rows"] == 240
        assert set(payload["results"]) == {"popularity", "explicit"}
        assert payload["results"]["popularity"][0]["algorithm"] == "linear_regression"

    def test_compare_requires_split(self, raw_tracks):
        pipeline = ComparisonPipeline()
        pipeline.load_data(raw_tracks)
        pipeline.build_features()
        with pytest.raises(ValueError, match="split"):
            pipeline.compare("popularity")

    def test_run_from_csv(self, raw_tracks, tmp_path):
        csv_path = tmp_path / "tracks.csv"
        raw_tracks.to_csv(csv_path, index=False)
        out = tmp_path / "out" / "comparison.json"

        pipeline = ComparisonPipeline.run(
            RunConfig(data_path=str(csv_path)), targets=["explicit"], out_path=out
        )

        assert out.exists()
        assert len(pipeline.results["explicit"]) == len(pipeline.runners["explicit"].results)
        assert all(r.task == "classification" for r in pipeline.results["explicit"])
