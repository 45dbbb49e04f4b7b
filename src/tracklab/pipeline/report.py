"""Comparison report builders.

Turns ranked EvaluationResults into a flat table, JSON-ready dicts, a saved
JSON file and a printed console summary. Failed adapters are always listed,
with their error message, after the successful ones.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from tracklab.pipeline.evaluator import EvaluationResult

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "rank", "algorithm", "task", "status", "metric", "score",
    "threshold", "tn", "fp", "fn", "tp", "error",
]


def results_to_frame(results: Sequence[EvaluationResult]) -> pd.DataFrame:
    """One row per algorithm; metric columns appended after the fixed ones."""
    rows = []
    rank = 0
    for r in results:
        rank = rank + 1 if r.succeeded else rank
        row = {
            "rank": rank if r.succeeded else None,
            "algorithm": r.algorithm,
            "task": r.task,
            "status": r.status,
            "metric": r.primary_metric,
            "score": r.score,
            "threshold": r.threshold,
            "error": r.error,
        }
        if r.contingency is not None:
            row.update(r.contingency.to_dict())
        row.update(r.metrics)
        rows.append(row)

    df = pd.DataFrame(rows)
    extra = [c for c in df.columns if c not in REPORT_COLUMNS]
    return df.reindex(columns=REPORT_COLUMNS + extra)


def results_to_dicts(results: Sequence[EvaluationResult]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in results]


def save_report(
    results: Mapping[str, Sequence[EvaluationResult]],
    out_path: Path,
    meta: Optional[Dict[str, Any]] = None,
) -> Path:
    """Save results per target to JSON.

    Args:
        results: Target column -> ranked results
        out_path: JSON file to write
        meta: Run settings recorded alongside the results

    Returns:
        Path to saved file
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "meta": meta or {},
        "results": {target: results_to_dicts(rs) for target, rs in results.items()},
    }
    with open(out_path, "w") as f:
        json.dump(payload, f, indent=2, default=str, allow_nan=False)

    logger.info(f"Report saved to {out_path}")
    return out_path


def print_comparison(results: Sequence[EvaluationResult], title: str = "") -> None:
    """Print a ranked comparison table."""
    print(f"\n{'='*60}")
    print(f"Comparison: {title.upper()}" if title else "Comparison")
    print(f"{'='*60}")

    for i, r in enumerate(results, start=1):
        if not r.succeeded:
            print(f"  --  {r.algorithm:22s} FAILED: {r.error}")
            continue
        line = f"  {i:2d}  {r.algorithm:22s} {r.primary_metric}={r.score:.4f}"
        if r.task == "classification":
            t1 = r.metrics.get("type_i_error", math.nan)
            t2 = r.metrics.get("type_ii_error", math.nan)
            line += f"  type I={t1:.3f}  type II={t2:.3f}"
            if r.threshold is not None:
                line += f"  (threshold {r.threshold:.2f})"
        print(line)

    n_failed = sum(not r.succeeded for r in results)
    print(f"\nAdapters: {len(results)}  Failed: {n_failed}")
