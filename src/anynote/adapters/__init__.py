"""Adapters - I/O implementations of ports."""

from .json_store import InMemoryRecordStore, JsonFileRecordStore

__all__ = [
    "JsonFileRecordStore",
    "InMemoryRecordStore",
]
