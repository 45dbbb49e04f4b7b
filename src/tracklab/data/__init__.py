"""Data module - raw track access and schema.

Public API:
    TrackReader - CSV access for the raw track table
    Track - Pydantic record for one raw track
    records_to_frame - Build a raw DataFrame from Track records
"""

from tracklab.data.reader import TrackReader, records_to_frame
from tracklab.data.schemas import Track

__all__ = [
    "TrackReader",
    "Track",
    "records_to_frame",
]
