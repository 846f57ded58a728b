"""Functional core - pure business logic with no I/O."""

from .errors import (
    AnynoteError,
    DuplicateUsername,
    InvalidCredential,
    InvalidToken,
    NotAuthenticated,
    NotFound,
    Result,
    StorageError,
    ValidationError,
)
from .records import KEEP, bump, decode_record, encode_record, utcnow
from .notes import Note, NoteForm, NotePatch, NOTE_COLORS
from .tasks import Task, TaskForm, TaskPatch, TASK_PRIORITIES, resolve_linked_note
from .users import User
from .filters import SortKey, SortOrder, TaskStatus, all_tags, view_notes, view_tasks
from .stats import AccountStats, TaskStats, account_stats, task_stats
from .backup import ImportSummary, build_export, parse_import

__all__ = [
    # Errors
    "AnynoteError",
    "DuplicateUsername",
    "InvalidCredential",
    "InvalidToken",
    "NotAuthenticated",
    "NotFound",
    "Result",
    "StorageError",
    "ValidationError",
    # Records
    "KEEP",
    "bump",
    "decode_record",
    "encode_record",
    "utcnow",
    # Notes
    "Note",
    "NoteForm",
    "NotePatch",
    "NOTE_COLORS",
    # Tasks
    "Task",
    "TaskForm",
    "TaskPatch",
    "TASK_PRIORITIES",
    "resolve_linked_note",
    # Users
    "User",
    # Filters
    "SortKey",
    "SortOrder",
    "TaskStatus",
    "all_tags",
    "view_notes",
    "view_tasks",
    # Stats
    "AccountStats",
    "TaskStats",
    "account_stats",
    "task_stats",
    # Backup
    "ImportSummary",
    "build_export",
    "parse_import",
]
