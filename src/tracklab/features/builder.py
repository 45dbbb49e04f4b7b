"""Feature derivation for raw track data.

Turns the raw heterogeneous track table into the fixed model schema:
validates every required column, derives collaboration counts and decade
buckets, then drops free text and the decade label.

Derived Features:
    num_artists - Comma-separated tokens in the artist credit (minimum 1)
    decade      - Ten-year bucket of `year` ("1921-1930" ... "2011-2020")

Key Classes:
    FeatureDeriver - Validates and derives features (pure, no state)
    ModelDataset   - Immutable model-ready table (15 predictors + target)

Usage:
    from tracklab.features import FeatureDeriver

    deriver = FeatureDeriver()
    dataset = deriver.derive(raw_df)
    X = dataset.rows(train_idx)[dataset.predictors("popularity")]
"""

from __future__ import annotations

import bisect
import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from tracklab.errors import InvalidRangeError, SchemaError
from tracklab.features.definitions import (
    CATEGORICAL_COLUMNS,
    CATEGORY_LEVELS,
    DECADE,
    DECADE_EDGES,
    DECADE_LABELS,
    ID_COLUMN,
    MODEL_COLUMNS,
    NUM_ARTISTS,
    POPULARITY,
    RAW_INTEGER_COLUMNS,
    RAW_NUMERIC_COLUMNS,
    RAW_TEXT_COLUMNS,
    REQUIRED_RAW_COLUMNS,
    YEAR_COLUMN,
    YEAR_RANGE,
    predictors_for,
)

logger = logging.getLogger(__name__)

BRACKETS = "[](){}"


def count_artists(credit: str) -> int:
    """Count artists in a raw credit string.

    Enclosing brackets are stripped, then the credit is split on commas.
    "['A', 'B', 'C']" -> 3, "Solo Artist" -> 1, "" -> 1.
    """
    stripped = credit.strip().strip(BRACKETS)
    tokens = [t for t in stripped.split(",") if t.strip()]
    return max(len(tokens), 1)


def decade_for_year(year: int) -> str:
    """Decade bucket label for a single year.

    Raises:
        InvalidRangeError: If year is outside [1921, 2021).
    """
    lo, hi = YEAR_RANGE
    if not lo <= year < hi:
        raise InvalidRangeError(f"Column '{YEAR_COLUMN}': year {year} outside [{lo}, {hi})")
    return DECADE_LABELS[bisect.bisect_right(DECADE_EDGES, year) - 1]


def assign_decades(years: pd.Series) -> pd.Series:
    """Vectorized decade assignment (half-open buckets).

    Raises:
        InvalidRangeError: If any year is outside [1921, 2021).
    """
    lo, hi = YEAR_RANGE
    bad = years[(years < lo) | (years >= hi)]
    if len(bad):
        sample = sorted(bad.unique().tolist())[:5]
        raise InvalidRangeError(
            f"Column '{YEAR_COLUMN}': {len(bad)} row(s) outside [{lo}, {hi}), e.g. {sample}"
        )
    decades = pd.cut(years, bins=DECADE_EDGES, right=False, labels=DECADE_LABELS)
    return decades.astype(str)


class ModelDataset:
    """Immutable model-ready table.

    Holds the 16 numeric model columns. Every accessor returns a copy, so
    stages and adapters can never mutate the shared dataset.
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        categorical: Sequence[str] = tuple(CATEGORICAL_COLUMNS),
        ids: Optional[Iterable[str]] = None,
    ) -> None:
        self._frame = frame.reset_index(drop=True).copy()
        self._categorical = tuple(categorical)
        self._ids = tuple(ids) if ids is not None else tuple(str(i) for i in range(len(frame)))

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return f"ModelDataset(rows={len(self)}, columns={len(self._frame.columns)})"

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def columns(self) -> List[str]:
        return list(self._frame.columns)

    @property
    def categorical(self) -> tuple:
        return self._categorical

    @property
    def ids(self) -> tuple:
        return self._ids

    def predictors(self, target: str) -> List[str]:
        """Predictor columns for a target (every other model column)."""
        if target not in self._frame.columns:
            raise KeyError(f"Target '{target}' not in dataset columns")
        return [c for c in self._frame.columns if c != target]

    def rows(self, indices: Optional[Sequence[int]] = None) -> pd.DataFrame:
        """Copy of the rows at positional `indices` (all rows if None)."""
        if indices is None:
            return self.frame
        return self._frame.iloc[np.asarray(indices)].copy()


class FeatureDeriver:
    """Derive the fixed analytic schema from raw track rows.

    Pure: inputs are never modified, and the same raw frame always yields
    the same ModelDataset.
    """

    def derive_features(self, raw_df: pd.DataFrame) -> pd.DataFrame:
        """Full analytic table: validated raw columns plus derived features.

        Args:
            raw_df: Raw track table.

        Returns:
            Copy of the raw table with `num_artists` and `decade` added.

        Raises:
            SchemaError: Missing/mistyped column, missing values, duplicate ids.
            InvalidRangeError: Year or coded value outside its domain.
        """
        df = self._validate(raw_df)
        df[NUM_ARTISTS] = df["artists"].map(count_artists).astype("int64")
        df[DECADE] = assign_decades(df[YEAR_COLUMN])
        return df

    def derive(self, raw_df: pd.DataFrame) -> ModelDataset:
        """Build the model dataset (free text and decade removed)."""
        df = self.derive_features(raw_df)
        model_df = df[MODEL_COLUMNS].astype(float)
        logger.info(
            f"Derived model dataset: {len(model_df):,} rows, "
            f"{len(predictors_for(POPULARITY))} predictors per task"
        )
        return ModelDataset(model_df, CATEGORICAL_COLUMNS, ids=df[ID_COLUMN].tolist())

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate(self, raw_df: pd.DataFrame) -> pd.DataFrame:
        missing = [c for c in REQUIRED_RAW_COLUMNS if c not in raw_df.columns]
        if missing:
            raise SchemaError(missing[0], f"missing (all missing: {missing})")

        df = raw_df.copy()

        for col in REQUIRED_RAW_COLUMNS:
            if df[col].isna().any():
                raise SchemaError(col, f"{int(df[col].isna().sum())} missing value(s)")

        for col in RAW_TEXT_COLUMNS:
            if not df[col].map(lambda v: isinstance(v, str)).all():
                raise SchemaError(col, "expected text values")

        for col in RAW_NUMERIC_COLUMNS:
            if not pd.api.types.is_numeric_dtype(df[col]):
                raise SchemaError(col, f"expected numeric, got {df[col].dtype}")

        for col in RAW_INTEGER_COLUMNS:
            if not pd.api.types.is_numeric_dtype(df[col]):
                raise SchemaError(col, f"expected integer, got {df[col].dtype}")
            values = df[col].astype(float)
            if not np.all(np.mod(values, 1) == 0):
                raise SchemaError(col, "expected integer values")
            df[col] = values.astype("int64")

        if df[ID_COLUMN].duplicated().any():
            raise SchemaError(ID_COLUMN, f"{int(df[ID_COLUMN].duplicated().sum())} duplicate id(s)")

        for col, levels in CATEGORY_LEVELS.items():
            bad = ~df[col].isin(levels)
            if bad.any():
                raise InvalidRangeError(
                    f"Column '{col}': codes {sorted(df.loc[bad, col].unique().tolist())} "
                    f"not in {levels}"
                )

        out_of_range = (df[POPULARITY] < 0) | (df[POPULARITY] > 100)
        if out_of_range.any():
            raise InvalidRangeError(
                f"Column '{POPULARITY}': {int(out_of_range.sum())} value(s) outside [0, 100]"
            )

        return df
