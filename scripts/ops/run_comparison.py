"""Model comparison runner.

Orchestrates the complete comparison workflow:
1. Load raw tracks
2. Derive features
3. Split into train/test
4. Compare adapters per target
5. Save report

Usage:
    python scripts/ops/run_comparison.py --data storage/data.csv --task both
    python scripts/ops/run_comparison.py --task classification --tune-thresholds
"""

import argparse
import logging
from pathlib import Path

from tracklab.config import DEFAULT_DATA_PATH, DEFAULT_THRESHOLD, RANDOM_SEED, TRAIN_FRACTION, RunConfig
from tracklab.errors import TracklabError
from tracklab.features.definitions import EXPLICIT, POPULARITY
from tracklab.pipeline import ComparisonPipeline, print_comparison

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

TASK_TARGETS = {
    "regression": [POPULARITY],
    "classification": [EXPLICIT],
    "both": [POPULARITY, EXPLICIT],
}


def main():
    """Run the full comparison pipeline."""
    parser = argparse.ArgumentParser(
        description="Compare model families on track popularity and explicit content"
    )
    parser.add_argument(
        "--data",
        default=DEFAULT_DATA_PATH,
        help="Raw track CSV",
    )
    parser.add_argument(
        "--task",
        choices=sorted(TASK_TARGETS),
        default="both",
        help="Which comparison(s) to run. Default: both",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=RANDOM_SEED,
        help="Seed for split, subsampling and CV folds",
    )
    parser.add_argument(
        "--train-fraction",
        type=float,
        default=TRAIN_FRACTION,
        help="Share of rows in the training set",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_THRESHOLD,
        help="Probability threshold for classifiers",
    )
    parser.add_argument(
        "--tune-thresholds",
        action="store_true",
        help="Select thresholds on a validation carve-out of the train set",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Report JSON path (default: storage/reports/comparison.json)",
    )

    args = parser.parse_args()

    try:
        config = RunConfig(
            seed=args.seed,
            train_fraction=args.train_fraction,
            threshold=args.threshold,
            tune_thresholds=args.tune_thresholds,
            data_path=args.data,
        )
    except TracklabError as e:
        print(f"Invalid configuration: {e}")
        return 2

    print("\n" + "=" * 70)
    print("TRACKLAB MODEL COMPARISON")
    print("=" * 70)

    pipeline = ComparisonPipeline(config)

    # Step 1: Load
    print("\n[1/5] LOADING DATA")
    print("-" * 70)
    try:
        pipeline.load_data()
    except FileNotFoundError as e:
        print(f"Input rejected: {e}")
        return 1

    # Step 2: Features
    print("\n[2/5] DERIVING FEATURES")
    print("-" * 70)
    try:
        dataset = pipeline.build_features()
    except TracklabError as e:
        print(f"Input rejected: {e}")
        return 1
    print(f"Model dataset: {len(dataset):,} rows")

    # Step 3: Split
    print("\n[3/5] SPLITTING DATA")
    print("-" * 70)
    try:
        data_split = pipeline.split()
    except TracklabError as e:
        print(f"Invalid configuration: {e}")
        return 2
    data_split.print_summary()

    # Step 4: Compare
    print("\n[4/5] COMPARING MODELS")
    print("-" * 70)
    for target in TASK_TARGETS[args.task]:
        print_comparison(pipeline.compare(target), title=target)

    # Step 5: Report
    print("\n[5/5] SAVING REPORT")
    print("-" * 70)
    path = pipeline.save_report(args.out)

    print("\n" + "=" * 70)
    print("COMPARISON COMPLETE")
    print("=" * 70)
    print(f"Report: {path}")

    return 0


if __name__ == "__main__":
    exit(main())
