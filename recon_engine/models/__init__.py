"""Record models."""

from .records import ComparableRecord, RecordType

__all__ = ["ComparableRecord", "RecordType"]
