"""
Pipeline Module

Evaluation, comparison and end-to-end orchestration.

Components:
    ComparisonPipeline - Full workflow (load -> features -> split -> compare -> report)
    ComparisonRunner   - Same-split comparison of many adapters
    Evaluator          - Clamped regression / thresholded classification metrics
"""

from tracklab.pipeline.evaluator import (
    ContingencyTable,
    EvaluationOptions,
    EvaluationResult,
    Evaluator,
    evaluate,
)
from tracklab.pipeline.report import print_comparison, results_to_frame, save_report
from tracklab.pipeline.runner import ComparisonPipeline, ComparisonRunner, rank_results

__all__ = [
    "ComparisonPipeline",
    "ComparisonRunner",
    "rank_results",
    "Evaluator",
    "EvaluationOptions",
    "EvaluationResult",
    "ContingencyTable",
    "evaluate",
    "results_to_frame",
    "save_report",
    "print_comparison",
]
