"""
Filter/sort engine - pure functions deriving ordered views.

Nothing here mutates its input; every function returns a new list.
"""

import unicodedata
from enum import Enum
from typing import Iterable, Protocol, Sequence, TypeVar

from .errors import ValidationError
from .notes import Note
from .tasks import Task


class SortKey(Enum):
    """Field a view is ordered by."""

    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


class TaskStatus(Enum):
    """Completion filter for task views."""

    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class Filterable(Protocol):
    title: str
    tags: list[str]

    def searchable_fields(self) -> list[str]: ...


T = TypeVar("T", bound=Filterable)


def parse_enum(enum_cls, value):
    """Accept an enum member or its string value."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid value '{value}'. Choose one of: {choices}")


def filter_by_search(items: Iterable[T], search_term: str) -> list[T]:
    """Case-insensitive substring match against any searchable field."""
    term = (search_term or "").casefold()
    if not term:
        return list(items)
    return [
        item
        for item in items
        if any(term in text.casefold() for text in item.searchable_fields())
    ]


def filter_by_tags(items: Iterable[T], selected_tags: Sequence[str]) -> list[T]:
    """Keep items carrying every selected tag (intersection, not union)."""
    required = set(selected_tags or ())
    if not required:
        return list(items)
    return [item for item in items if required.issubset(item.tags)]


def filter_by_status(tasks: Iterable[Task], status: TaskStatus | str) -> list[Task]:
    status = parse_enum(TaskStatus, status)
    if status is TaskStatus.COMPLETED:
        return [t for t in tasks if t.completed]
    if status is TaskStatus.PENDING:
        return [t for t in tasks if not t.completed]
    return list(tasks)


def collation_key(text: str) -> tuple[str, str, str]:
    """
    Locale-style collation key for titles.

    Primary level ignores accents and case, then accents decide, then case.
    """
    folded = text.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base, folded, text)


def sort_items(
    items: Iterable[T],
    sort_by: SortKey | str = SortKey.UPDATED_AT,
    sort_order: SortOrder | str = SortOrder.DESC,
) -> list[T]:
    """
    Stable sort by the requested key.

    Equal keys keep their input order in both directions.
    """
    sort_by = parse_enum(SortKey, sort_by)
    sort_order = parse_enum(SortOrder, sort_order)

    if sort_by is SortKey.TITLE:
        key = lambda item: collation_key(item.title)
    elif sort_by is SortKey.CREATED_AT:
        key = lambda item: item.created_at
    else:
        key = lambda item: item.updated_at

    return sorted(items, key=key, reverse=sort_order is SortOrder.DESC)


def pinned_first(notes: Iterable[Note]) -> list[Note]:
    """Move pinned notes ahead of unpinned ones, keeping each group's order."""
    notes = list(notes)
    return [n for n in notes if n.is_pinned] + [n for n in notes if not n.is_pinned]


def view_notes(
    notes: Iterable[Note],
    search_term: str = "",
    selected_tags: Sequence[str] = (),
    sort_by: SortKey | str = SortKey.UPDATED_AT,
    sort_order: SortOrder | str = SortOrder.DESC,
) -> list[Note]:
    """Search, tag-filter and sort notes, then apply pin priority."""
    filtered = filter_by_tags(filter_by_search(notes, search_term), selected_tags)
    return pinned_first(sort_items(filtered, sort_by, sort_order))


def view_tasks(
    tasks: Iterable[Task],
    search_term: str = "",
    selected_tags: Sequence[str] = (),
    status: TaskStatus | str = TaskStatus.ALL,
    sort_by: SortKey | str = SortKey.CREATED_AT,
    sort_order: SortOrder | str = SortOrder.DESC,
) -> list[Task]:
    """Search, tag-filter, status-filter and sort tasks."""
    filtered = filter_by_tags(filter_by_search(tasks, search_term), selected_tags)
    return sort_items(filter_by_status(filtered, status), sort_by, sort_order)


def all_tags(items: Iterable[Filterable]) -> list[str]:
    """Deduplicated, sorted union of the tags on the given items."""
    return sorted({tag for item in items for tag in item.tags})
