"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime

from .errors import ValidationError
from .notes import MAX_CONTENT_LENGTH, MAX_TITLE_LENGTH, Note
from .records import KEEP, bump, created_date, decode_date, normalize_tags

TASK_PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"


@dataclass
class Task:
    """A to-do item, optionally linked to one of its owner's notes."""

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    completed: bool = False
    priority: str = DEFAULT_PRIORITY
    due_date: datetime | None = None
    linked_note_id: str | None = None
    tags: list[str] = field(default_factory=list)

    def searchable_fields(self) -> list[str]:
        return [self.title, self.description or "", *self.tags]

    def is_overdue(self, as_of: datetime) -> bool:
        """Open task whose due date has passed."""
        return not self.completed and self.due_date is not None and self.due_date < as_of

    def to_record(self) -> dict:
        record = {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "completed": self.completed,
            "priority": self.priority,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            record["description"] = self.description
        if self.due_date is not None:
            record["dueDate"] = self.due_date
        if self.linked_note_id is not None:
            record["linkedNoteId"] = self.linked_note_id
        return record

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """Create a Task from a stored or imported record."""
        created = created_date(data)
        updated = decode_date(data.get("updatedAt")) or created
        # Older exports call the link "noteId"
        linked = data.get("linkedNoteId", data.get("noteId")) or None
        return cls(
            id=str(data["id"]),
            user_id=str(data.get("userId", "")),
            title=data.get("title", "") or "",
            created_at=created,
            updated_at=max(updated, created),
            description=data.get("description") or None,
            completed=bool(data.get("completed", False)),
            priority=normalize_priority(data.get("priority")),
            due_date=decode_date(data.get("dueDate")),
            linked_note_id=str(linked) if linked is not None else None,
            tags=normalize_tags(data.get("tags")),
        )


@dataclass
class TaskForm:
    """Fields a user fills in when creating a task."""

    title: str = ""
    description: str | None = None
    priority: str = DEFAULT_PRIORITY
    due_date: datetime | None = None
    linked_note_id: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass
class TaskPatch:
    """Partial task update. Fields left as KEEP are not touched; None clears optionals."""

    title: str = KEEP
    description: str | None = KEEP
    completed: bool = KEEP
    priority: str = KEEP
    due_date: datetime | None = KEEP
    linked_note_id: str | None = KEEP
    tags: list[str] = KEEP


def normalize_priority(priority: str | None) -> str:
    if priority is None or priority == "":
        return DEFAULT_PRIORITY
    priority = str(priority).strip().lower()
    if priority not in TASK_PRIORITIES:
        raise ValidationError(
            f"Unknown priority '{priority}'. Choose one of: {', '.join(TASK_PRIORITIES)}"
        )
    return priority


def validate_task(task: Task) -> Task:
    if not task.title.strip():
        raise ValidationError("A task needs a title")
    if len(task.title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title is longer than {MAX_TITLE_LENGTH} characters")
    if task.description and len(task.description) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Description is longer than {MAX_CONTENT_LENGTH} characters")
    return task


def new_task(user_id: str, form: TaskForm, now: datetime) -> Task:
    """Build and validate a fresh, open task."""
    task = Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=form.title.strip(),
        created_at=now,
        updated_at=now,
        description=form.description or None,
        completed=False,
        priority=normalize_priority(form.priority),
        due_date=decode_date(form.due_date),
        linked_note_id=form.linked_note_id or None,
        tags=normalize_tags(form.tags),
    )
    return validate_task(task)


def apply_task_patch(task: Task, patch: TaskPatch, now: datetime) -> Task:
    """Merge a patch into a task field by field and bump updated_at."""
    changes = {}
    if patch.title is not KEEP:
        changes["title"] = str(patch.title).strip()
    if patch.description is not KEEP:
        changes["description"] = patch.description or None
    if patch.completed is not KEEP:
        changes["completed"] = bool(patch.completed)
    if patch.priority is not KEEP:
        changes["priority"] = normalize_priority(patch.priority)
    if patch.due_date is not KEEP:
        changes["due_date"] = decode_date(patch.due_date)
    if patch.linked_note_id is not KEEP:
        changes["linked_note_id"] = patch.linked_note_id or None
    if patch.tags is not KEEP:
        changes["tags"] = normalize_tags(patch.tags)

    updated = replace(task, **changes, updated_at=bump(task.updated_at, now))
    return validate_task(updated)


def resolve_linked_note(task: Task, notes: list[Note]) -> Note | None:
    """
    The note a task links to, or None.

    Broken links (deleted notes, other users' notes) resolve to None.
    """
    if not task.linked_note_id:
        return None
    return next(
        (n for n in notes if n.id == task.linked_note_id and n.user_id == task.user_id),
        None,
    )
