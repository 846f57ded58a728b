"""Pure note domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime

from .errors import ValidationError
from .records import KEEP, bump, created_date, decode_date, normalize_tags

MAX_TITLE_LENGTH = 100
MAX_CONTENT_LENGTH = 10000

# Palette tokens; "default" means the note has no color
NOTE_COLORS = ("yellow", "green", "blue", "purple", "pink", "orange")
DEFAULT_COLOR = "default"


@dataclass
class Note:
    """A note owned by exactly one user."""

    id: str
    user_id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)
    is_pinned: bool = False
    color: str | None = None

    def searchable_fields(self) -> list[str]:
        return [self.title, self.content, *self.tags]

    def to_record(self) -> dict:
        """Serialize to the persisted camelCase shape (dates left as datetimes)."""
        record = {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "isPinned": self.is_pinned,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.color:
            record["color"] = self.color
        return record

    @classmethod
    def from_record(cls, data: dict) -> "Note":
        """Create a Note from a stored or imported record."""
        created = created_date(data)
        updated = decode_date(data.get("updatedAt")) or created
        return cls(
            id=str(data["id"]),
            user_id=str(data.get("userId", "")),
            title=data.get("title", "") or "",
            content=data.get("content", "") or "",
            created_at=created,
            updated_at=max(updated, created),
            tags=normalize_tags(data.get("tags")),
            is_pinned=bool(data.get("isPinned", False)),
            color=normalize_color(data.get("color")),
        )


@dataclass
class NoteForm:
    """Fields a user fills in when saving a new note."""

    title: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)
    color: str | None = None


@dataclass
class NotePatch:
    """Partial note update. Fields left as KEEP are not touched."""

    title: str = KEEP
    content: str = KEEP
    tags: list[str] = KEEP
    color: str | None = KEEP
    is_pinned: bool = KEEP


def normalize_color(color: str | None) -> str | None:
    """Map a color token to its stored form (None for no color)."""
    if color is None:
        return None
    color = str(color).strip().lower()
    if not color or color == DEFAULT_COLOR:
        return None
    if color not in NOTE_COLORS:
        raise ValidationError(
            f"Unknown color '{color}'. Choose one of: {', '.join((DEFAULT_COLOR, *NOTE_COLORS))}"
        )
    return color


def validate_note(note: Note) -> Note:
    """Check note limits. Returns the note unchanged if valid."""
    if not note.title.strip() and not note.content.strip():
        raise ValidationError("A note needs a title or some content")
    if len(note.title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title is longer than {MAX_TITLE_LENGTH} characters")
    if len(note.content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Content is longer than {MAX_CONTENT_LENGTH} characters")
    return note


def new_note(user_id: str, form: NoteForm, now: datetime) -> Note:
    """Build and validate a fresh, unpinned note."""
    note = Note(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=form.title.strip(),
        content=form.content,
        created_at=now,
        updated_at=now,
        tags=normalize_tags(form.tags),
        is_pinned=False,
        color=normalize_color(form.color),
    )
    return validate_note(note)


def apply_note_patch(note: Note, patch: NotePatch, now: datetime) -> Note:
    """Merge a patch into a note field by field and bump updated_at."""
    changes = {}
    if patch.title is not KEEP:
        changes["title"] = str(patch.title).strip()
    if patch.content is not KEEP:
        changes["content"] = str(patch.content)
    if patch.tags is not KEEP:
        changes["tags"] = normalize_tags(patch.tags)
    if patch.color is not KEEP:
        changes["color"] = normalize_color(patch.color)
    if patch.is_pinned is not KEEP:
        changes["is_pinned"] = bool(patch.is_pinned)

    updated = replace(note, **changes, updated_at=bump(note.updated_at, now))
    return validate_note(updated)
