"""Tests for the Evaluator: clamping, thresholding and contingency counts."""

import math
from dataclasses import MISSING, fields

import numpy as np
import pytest

from tracklab.errors import InvalidRangeError
from tracklab.pipeline import (
    ContingencyTable,
    EvaluationOptions,
    EvaluationResult,
    Evaluator,
    evaluate,
)


def fields_by_name(cls):
    return {f.name: f for f in fields(cls)}


class TestRegression:
    """Tests for regression scoring."""

    def test_clamps_into_range(self):
        """-5 is scored as 0 and 130 as 100."""
        result = evaluate("regression", [10, 90], [-5, 130])

        assert result.metrics["mse"] == pytest.approx((100 + 100) / 2)
        assert result.metrics["n_clamped"] == 2

    def test_single_clamped_row(self):
        result = evaluate("regression", [10], [-5])
        assert result.metrics["mse"] == pytest.approx(100.0)

    def test_perfect_predictions(self):
        result = evaluate("regression", [0, 50, 100], [0, 50, 100])
        assert result.metrics["mse"] == 0.0
        assert result.metrics["n_clamped"] == 0
        assert result.primary_metric == "mse"

    def test_rmse_and_mae(self):
        result = evaluate("regression", [10, 20], [13, 16])
        assert result.metrics["mse"] == pytest.approx(12.5)
        assert result.metrics["rmse"] == pytest.approx(math.sqrt(12.5))
        assert result.metrics["mae"] == pytest.approx(3.5)

    def test_custom_value_range(self):
        options = EvaluationOptions(value_range=(0.0, 10.0))
        result = Evaluator(options).evaluate("regression", [10], [50])
        assert result.metrics["mse"] == 0.0

    @pytest.mark.parametrize("true,pred,match", [
        ([1, 2], [1], "Length mismatch"),
        ([], [], "no rows"),
        ([1, 2], [1, np.nan], "non-finite"),
    ])
    def test_invalid_input(self, true, pred, match):
        with pytest.raises(ValueError, match=match):
            evaluate("regression", true, pred)

    def test_unknown_task(self):
        with pytest.raises(ValueError, match="Unknown task"):
            evaluate("ranking", [1], [1])


class TestClassification:
    """Tests for thresholded classification scoring."""

    def test_hard_labels(self):
        result = evaluate("classification", [0, 0, 1, 1], [0, 1, 1, 0])

        assert result.contingency == ContingencyTable(tn=1, fp=1, fn=1, tp=1)
        assert result.metrics["accuracy"] == 0.5
        assert result.threshold is None

    def test_probabilities_thresholded_strictly(self):
        """A probability equal to the threshold is negative."""
        result = evaluate("classification", [0, 1, 1], [0.5, 0.51, 0.9])

        assert result.threshold == 0.5
        assert result.contingency.to_dict() == {"tn": 1, "fp": 0, "fn": 0, "tp": 2}
        assert result.metrics["accuracy"] == 1.0

    def test_error_rates(self):
        # 4 true negatives: 1 false positive; 2 true positives: 1 false negative
        true = [0, 0, 0, 0, 1, 1]
        pred = [0, 0, 0, 1, 1, 0]
        result = evaluate("classification", true, pred)

        assert result.metrics["type_i_error"] == pytest.approx(0.25)
        assert result.metrics["type_ii_error"] == pytest.approx(0.5)
        assert result.contingency.n == 6

    def test_no_positives_gives_nan_type_ii(self):
        result = evaluate("classification", [0, 0], [0, 1])
        assert math.isnan(result.metrics["type_ii_error"])
        assert result.metrics["type_i_error"] == 0.5

    def test_contingency_frame(self):
        table = ContingencyTable(tn=5, fp=2, fn=1, tp=3)
        frame = table.to_frame()

        assert frame.loc[0, 0] == 5 and frame.loc[0, 1] == 2
        assert frame.loc[1, 0] == 1 and frame.loc[1, 1] == 3
        assert table.accuracy == pytest.approx(8 / 11)

    def test_rejects_non_binary_truth(self):
        with pytest.raises(ValueError, match="0/1"):
            evaluate("classification", [0, 2], [0, 1])

    def test_rejects_probabilities_outside_unit_interval(self):
        with pytest.raises(ValueError, match=r"\[0, 1\]"):
            evaluate("classification", [0, 1], [0.2, 1.4])

    def test_primary_metric(self):
        result = evaluate("classification", [0, 1], [0, 1])
        assert result.primary_metric == "accuracy"
        assert result.score == 1.0


class TestThresholds:
    """Tests for threshold sweeps and selection."""

    @pytest.fixture
    def scored(self):
        rng = np.random.default_rng(0)
        true = rng.integers(0, 2, 400)
        probs = np.clip(0.3 * true + rng.uniform(0, 0.7, 400), 0, 1)
        return true, probs

    def test_lower_threshold_trades_type_ii_for_type_i(self, scored):
        """Lowering the cut-off flags more positives."""
        true, probs = scored
        low, default = Evaluator().sweep_thresholds(true, probs, [0.25, 0.5])

        assert low.metrics["type_i_error"] >= default.metrics["type_i_error"]
        assert low.metrics["type_ii_error"] <= default.metrics["type_ii_error"]

    def test_sweep_matches_individual_evaluations(self, scored):
        true, probs = scored
        evaluator = Evaluator()
        sweep = evaluator.sweep_thresholds(true, probs, [0.3, 0.6])

        for result in sweep:
            single = evaluator.evaluate(
                "classification", true, probs, EvaluationOptions(threshold=result.threshold)
            )
            assert result.contingency == single.contingency

    def test_sweep_thresholds_zero_one_probabilities(self):
        """Probabilities that happen to be 0/1 are still thresholded."""
        sweep = Evaluator().sweep_thresholds([0, 1], [0.0, 1.0], [0.2, 0.8])
        assert [r.threshold for r in sweep] == [0.2, 0.8]

    def test_select_threshold_best_accuracy(self):
        true = [0, 0, 1, 1]
        probs = [0.1, 0.2, 0.3, 0.4]
        assert Evaluator().select_threshold(true, probs, [0.15, 0.25, 0.5]) == 0.25

    def test_select_threshold_tie_prefers_default(self):
        true = [0, 1]
        probs = [0.1, 0.9]
        assert Evaluator().select_threshold(true, probs, [0.2, 0.45, 0.8]) == 0.45

    @pytest.mark.parametrize("threshold", [0.0, 1.0, -0.2, 1.3])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(InvalidRangeError):
            EvaluationOptions(threshold=threshold)

    def test_invalid_value_range(self):
        with pytest.raises(InvalidRangeError):
            EvaluationOptions(value_range=(100.0, 0.0))


class TestResult:
    """Tests for EvaluationResult."""

    def test_metrics_default_is_a_factory(self):
        """Dataclasses reject unhashable defaults, so metrics defaults via a factory."""
        metrics_field = fields_by_name(EvaluationResult)["metrics"]
        assert metrics_field.default_factory is dict
        assert metrics_field.default is MISSING

    def test_default_metrics_not_shared(self):
        a = EvaluationResult(algorithm="a", task="regression")
        b = EvaluationResult(algorithm="b", task="regression")

        assert dict(a.metrics) == {}
        assert a.metrics is not b.metrics
        with pytest.raises(TypeError):
            a.metrics["mse"] = 1.0

    def test_to_dict_nan_becomes_none(self):
        result = evaluate("classification", [0, 0], [0, 1])
        assert result.to_dict()["metrics"]["type_ii_error"] is None

    def test_failed_result(self):
        result = Evaluator.failed("qda", "classification", "singular covariance")

        assert not result.succeeded
        assert math.isnan(result.score)
        assert result.to_dict()["error"] == "singular covariance"

    def test_metrics_read_only(self):
        result = evaluate("regression", [1], [2])
        with pytest.raises(TypeError):
            result.metrics["mse"] = 0.0

    def test_to_dict_rounds_metrics(self):
        result = evaluate("regression", [0, 0, 0], [1, 1, 2])
        assert result.to_dict()["metrics"]["mse"] == 2.0
