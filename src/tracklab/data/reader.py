"""Read-only access to raw track data.

Provides TrackReader for loading the raw track CSV into a DataFrame. No
cleaning happens here; column checks and derivation belong to
FeatureDeriver.

Key Methods:
    read() - Load the CSV as a raw DataFrame
    validate_records() - Validate a sample of rows against the Track schema

Usage:
    from tracklab.data import TrackReader

    reader = TrackReader("storage/data.csv")
    raw_df = reader.read()
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from tracklab.config import DEFAULT_DATA_PATH
from tracklab.data.schemas import Track
from tracklab.features.definitions import RAW_TEXT_COLUMNS, REQUIRED_RAW_COLUMNS

logger = logging.getLogger(__name__)


class TrackReader:
    """Lightweight CSV client for raw track data."""

    def __init__(self, data_path: Optional[str] = None) -> None:
        self.data_path = str(data_path or DEFAULT_DATA_PATH)
        if not os.path.exists(self.data_path):
            raise FileNotFoundError(f"Track data not found: {self.data_path}")

    def read(self) -> pd.DataFrame:
        """Load the raw track table.

        Text columns are read as strings so release dates like "1921" are
        not coerced to integers.
        """
        logger.info(f"Reading tracks from {self.data_path}")
        df = pd.read_csv(
            self.data_path,
            dtype={c: str for c in RAW_TEXT_COLUMNS},
            keep_default_na=False,
            na_values={c: [""] for c in REQUIRED_RAW_COLUMNS if c not in RAW_TEXT_COLUMNS},
        )
        logger.info(f"Read {len(df):,} rows, {len(df.columns)} columns")
        return df

    @staticmethod
    def validate_records(df: pd.DataFrame, limit: int = 1000) -> List[str]:
        """Validate up to `limit` rows against the Track schema.

        Args:
            df: Raw track DataFrame
            limit: Maximum number of rows to check

        Returns:
            List of error messages, one per invalid row (empty if all valid)
        """
        errors = []
        for i, row in enumerate(df.head(limit).to_dict(orient="records")):
            try:
                Track.model_validate(row)
            except ValidationError as e:
                errors.append(f"row {i}: {e.error_count()} invalid field(s)")
        if errors:
            logger.warning(f"{len(errors)} of {min(limit, len(df))} sampled rows failed validation")
        return errors


def records_to_frame(tracks: Iterable[Track]) -> pd.DataFrame:
    """Build a raw DataFrame from Track records."""
    rows = [t.model_dump() for t in tracks]
    return pd.DataFrame(rows, columns=list(Track.model_fields))
