"""Error types raised across the pipeline.

SchemaError, InvalidFractionError and InvalidRangeError are fatal and stop a
run before any modeling. FitError is recoverable: the comparison runner
records the adapter as failed and moves on. PredictionRangeError signals a
clamping bug and is never caught.
"""

from __future__ import annotations


class TracklabError(Exception):
    """Base class for all Tracklab errors."""


class SchemaError(TracklabError, ValueError):
    """A required input column is missing or has the wrong type."""

    def __init__(self, column: str, reason: str):
        self.column = column
        self.reason = reason
        super().__init__(f"Column '{column}': {reason}")


class InvalidFractionError(TracklabError, ValueError):
    """A fraction parameter lies outside (0, 1)."""


class InvalidRangeError(TracklabError, ValueError):
    """A value lies outside its documented range."""


class FitError(TracklabError, RuntimeError):
    """An adapter could not fit its model."""


class PredictionRangeError(TracklabError, AssertionError):
    """A clamped prediction fell outside the target range."""


__all__ = [
    "TracklabError",
    "SchemaError",
    "InvalidFractionError",
    "InvalidRangeError",
    "FitError",
    "PredictionRangeError",
]
