"""Serialization infrastructure - revision stream formats."""

from .jsonl_revision_serializer import JsonLinesRevisionSerializer

__all__ = [
    "JsonLinesRevisionSerializer",
]
