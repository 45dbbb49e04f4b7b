"""Column definitions for raw tracks and the model dataset.

Raw schema (one row per track):
- ID_COLUMN: unique track identifier
- TEXT_COLUMNS: free-text fields, never modeled
- DATE_COLUMN: raw release date, kept as text ("YYYY-MM-DD", "YYYY-MM" or "YYYY")
- YEAR_COLUMN: canonical temporal feature
- CONTINUOUS_COLUMNS: audio attributes
- CATEGORICAL_COLUMNS: integer-coded categories (mode, key, explicit)
- POPULARITY: integer score 0..100

The release date is deliberately left unparsed. Its three formats make it the
wrong canonical representation; `year` is always present and complete.

Model dataset: every numeric column plus num_artists. Each task uses one
target and the remaining 15 columns as predictors, so `explicit` predicts
`popularity` and vice versa.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Tuple

Task = Literal["regression", "classification"]

ID_COLUMN = "id"
TEXT_COLUMNS = ["name", "artists"]
DATE_COLUMN = "release_date"
YEAR_COLUMN = "year"

CONTINUOUS_COLUMNS = [
    "acousticness",
    "danceability",
    "duration_ms",
    "energy",
    "instrumentalness",
    "liveness",
    "loudness",
    "speechiness",
    "tempo",
    "valence",
]

# Stored as integers but not ordinal
CATEGORICAL_COLUMNS = ["mode", "key", "explicit"]

POPULARITY = "popularity"
EXPLICIT = "explicit"

# Columns the raw frame must carry, grouped by expected kind
RAW_TEXT_COLUMNS = [ID_COLUMN] + TEXT_COLUMNS + [DATE_COLUMN]
RAW_INTEGER_COLUMNS = [YEAR_COLUMN] + CATEGORICAL_COLUMNS + [POPULARITY]
RAW_NUMERIC_COLUMNS = CONTINUOUS_COLUMNS
REQUIRED_RAW_COLUMNS = RAW_TEXT_COLUMNS + RAW_INTEGER_COLUMNS + RAW_NUMERIC_COLUMNS

# Allowed codes per categorical column
CATEGORY_LEVELS: Dict[str, List[int]] = {
    "mode": [0, 1],
    "key": list(range(12)),
    "explicit": [0, 1],
}

# Derived
NUM_ARTISTS = "num_artists"
DECADE = "decade"

# Ten half-open buckets [start, start + 10) covering 1921..2020
FIRST_YEAR = 1921
DECADE_WIDTH = 10
N_DECADES = 10
DECADE_EDGES = [FIRST_YEAR + DECADE_WIDTH * i for i in range(N_DECADES + 1)]
DECADE_LABELS = [f"{start}-{start + DECADE_WIDTH - 1}" for start in DECADE_EDGES[:-1]]
YEAR_RANGE: Tuple[int, int] = (DECADE_EDGES[0], DECADE_EDGES[-1])

# Model dataset columns (decade excluded: collinear with year)
MODEL_COLUMNS = (
    [YEAR_COLUMN, NUM_ARTISTS]
    + CONTINUOUS_COLUMNS
    + CATEGORICAL_COLUMNS
    + [POPULARITY]
)


TARGET_TASKS: Dict[str, Task] = {
    POPULARITY: "regression",
    EXPLICIT: "classification",
}


def task_for_target(target: str) -> Task:
    """Task type implied by a target column.

    Raises:
        KeyError: If the column is not a supported target.
    """
    if target not in TARGET_TASKS:
        raise KeyError(
            f"Unsupported target: {target}. Must be one of: {list(TARGET_TASKS)}"
        )
    return TARGET_TASKS[target]


def predictors_for(target: str) -> List[str]:
    """The 15 predictor columns used when modeling `target`."""
    return [c for c in MODEL_COLUMNS if c != target]
