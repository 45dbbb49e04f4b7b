"""
Tracklab - Model comparison for music track data

Two targets: popularity (regression), explicit (classification).
One protocol: fit -> predict -> evaluate, same split for every model.

Structure:
    data/      - Raw track schema and CSV reading
    features/  - Feature derivation (num_artists, decade, model dataset)
    models/    - Train/test split and model adapters
    pipeline/  - Evaluation, comparison runner, reports

Usage:
    from tracklab.pipeline import ComparisonRunner
    from tracklab.features import FeatureDeriver
    from tracklab.models import DatasetSplitter, regression_adapters
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
