"""Pydantic schema for a single track record.

Bulk validation happens column-wise in FeatureDeriver; this model validates
individual records (hand-built fixtures, API payloads, CSV rows spot checks)
and documents the bounds of every attribute.

Models:
    Track - Immutable raw track row

Usage:
    from tracklab.data.schemas import Track

    track = Track.model_validate(row_dict)
    print(track.year, track.popularity)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Track(BaseModel):
    """Raw track as it appears in the source dataset."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    artists: str
    release_date: str
    year: int

    # Normalized audio metrics
    acousticness: float = Field(ge=0.0, le=1.0)
    danceability: float = Field(ge=0.0, le=1.0)
    energy: float = Field(ge=0.0, le=1.0)
    instrumentalness: float = Field(ge=0.0, le=1.0)
    liveness: float = Field(ge=0.0, le=1.0)
    speechiness: float = Field(ge=0.0, le=1.0)
    valence: float = Field(ge=0.0, le=1.0)

    loudness: float  # dB, unbounded
    tempo: float = Field(ge=0.0)  # BPM
    duration_ms: int = Field(gt=0)

    # Categorical (integer-coded)
    mode: int = Field(ge=0, le=1)
    key: int = Field(ge=0, le=11)
    explicit: int = Field(ge=0, le=1)

    popularity: int = Field(ge=0, le=100)


__all__ = ["Track"]
