"""Account export/import documents - no I/O."""

from dataclasses import dataclass, replace
from datetime import datetime

from .errors import AnynoteError, ValidationError
from .notes import Note, validate_note
from .records import encode_date, encode_record
from .tasks import Task, validate_task
from .users import User


@dataclass
class ImportSummary:
    """Counts of records an import inserted or overwrote."""

    notes_inserted: int = 0
    notes_updated: int = 0
    tasks_inserted: int = 0
    tasks_updated: int = 0

    @property
    def total(self) -> int:
        return self.notes_inserted + self.notes_updated + self.tasks_inserted + self.tasks_updated


def build_export(user: User, notes: list[Note], tasks: list[Task], now: datetime) -> dict:
    """
    JSON-ready export of one account.

    Only the user's own records are included; credentials never are.
    """
    return {
        "user": encode_record(user.public_record()),
        "notes": [encode_record(n.to_record()) for n in notes if n.user_id == user.id],
        "tasks": [encode_record(t.to_record()) for t in tasks if t.user_id == user.id],
        "exportDate": encode_date(now),
    }


def _parse_section(document: dict, key: str, parse, user_id: str) -> list:
    section = document.get(key)
    if section is None:
        return []
    if not isinstance(section, list):
        raise ValidationError(f"'{key}' must be a list")

    parsed = []
    for i, raw in enumerate(section):
        if not isinstance(raw, dict):
            raise ValidationError(f"{key}[{i}] must be an object")
        try:
            record = parse(raw)
        except KeyError as e:
            raise ValidationError(f"{key}[{i}] is missing field {e}") from e
        except (AnynoteError, TypeError, ValueError) as e:
            raise ValidationError(f"{key}[{i}] is malformed: {e}") from e
        # Ownership in the file is ignored; the importer owns everything
        parsed.append(replace(record, user_id=user_id))
    return parsed


def _parse_note(raw: dict) -> Note:
    return validate_note(Note.from_record(raw))


def _parse_task(raw: dict) -> Task:
    return validate_task(Task.from_record(raw))


def parse_import(document, user_id: str) -> tuple[list[Note], list[Task]]:
    """
    Validate a whole import document before anything is applied.

    Raises ValidationError on the first structural problem.
    """
    if not isinstance(document, dict):
        raise ValidationError("Import document must be a JSON object")
    if "notes" not in document and "tasks" not in document:
        raise ValidationError("Import document has neither 'notes' nor 'tasks'")

    notes = _parse_section(document, "notes", _parse_note, user_id)
    tasks = _parse_section(document, "tasks", _parse_task, user_id)

    for key, records in (("notes", notes), ("tasks", tasks)):
        ids = [r.id for r in records]
        if len(ids) != len(set(ids)):
            raise ValidationError(f"'{key}' contains duplicate ids")
    return notes, tasks
