"""Pytest fixtures/config for Tracklab tests."""

import os
import sys

import numpy as np
import pandas as pd
import pytest


def pytest_sessionstart(session) -> None:  # type: ignore[unused-argument]
    repo_root = os.path.dirname(os.path.dirname(__file__))
    src_path = os.path.join(repo_root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


def make_raw_tracks(
    n: int = 300,
    seed: int = 0,
    dance_coef: float = 40.0,
    noise_sd: float = 1.0,
) -> pd.DataFrame:
    """Synthetic raw track table with known structure.

    popularity = round(20 + dance_coef * danceability + N(0, noise_sd))
    P(explicit) rises with speechiness. Every other column is independent noise.
    """
    rng = np.random.default_rng(seed)

    danceability = rng.uniform(0, 1, n)
    popularity = np.round(20 + dance_coef * danceability + rng.normal(0, noise_sd, n))
    speechiness = rng.uniform(0, 1, n)
    p_explicit = 1 / (1 + np.exp(-(-3 + 6 * speechiness)))
    years = rng.integers(1921, 2021, n)
    n_artists = rng.integers(1, 4, n)

    # Release dates in the three raw formats
    formats = [lambda y: f"{y}", lambda y: f"{y}-06", lambda y: f"{y}-06-15"]

    return pd.DataFrame({
        "id": [f"track{i:05d}" for i in range(n)],
        "name": [f"Song {i}" for i in range(n)],
        "artists": [
            "[" + ", ".join(f"'Artist {i}-{j}'" for j in range(k)) + "]"
            for i, k in enumerate(n_artists)
        ],
        "release_date": [formats[i % 3](y) for i, y in enumerate(years)],
        "year": years,
        "acousticness": rng.uniform(0, 1, n),
        "danceability": danceability,
        "duration_ms": rng.integers(60_000, 400_000, n),
        "energy": rng.uniform(0, 1, n),
        "instrumentalness": rng.uniform(0, 1, n),
        "liveness": rng.uniform(0, 1, n),
        "loudness": rng.uniform(-30, 0, n),
        "speechiness": speechiness,
        "tempo": rng.uniform(60, 180, n),
        "valence": rng.uniform(0, 1, n),
        "mode": rng.integers(0, 2, n),
        "key": rng.integers(0, 12, n),
        "explicit": (rng.uniform(0, 1, n) < p_explicit).astype(int),
        "popularity": np.clip(popularity, 0, 100).astype(int),
    })


@pytest.fixture
def raw_tracks() -> pd.DataFrame:
    """300 synthetic raw tracks."""
    return make_raw_tracks()


@pytest.fixture
def model_dataset(raw_tracks):
    """Model dataset derived from the synthetic tracks."""
    from tracklab.features import FeatureDeriver

    return FeatureDeriver().derive(raw_tracks)


@pytest.fixture
def data_split(model_dataset):
    """Default 80/20 split of the synthetic model dataset."""
    from tracklab.models import DatasetSplitter

    return DatasetSplitter(train_fraction=0.8, seed=42).split(model_dataset)


@pytest.fixture
def train_rows(model_dataset, data_split) -> pd.DataFrame:
    return model_dataset.rows(data_split.train)


@pytest.fixture
def test_rows(model_dataset, data_split) -> pd.DataFrame:
    return model_dataset.rows(data_split.test)
