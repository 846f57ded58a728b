"""Ports - interfaces/protocols for external dependencies."""

from .record_store import NOTES, SESSION, TASKS, USERS, RecordStore

__all__ = [
    "RecordStore",
    "USERS",
    "NOTES",
    "TASKS",
    "SESSION",
]
