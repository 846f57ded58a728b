"""Record encoding helpers shared by every entity - no I/O."""

from datetime import date, datetime, timedelta, timezone
from typing import Any

from .errors import StorageError

# Fields holding timestamps, recognized by name in every namespace
DATE_FIELDS = ("createdAt", "updatedAt", "dueDate")


class _Keep:
    """Patch marker: leave the current value of a field alone."""

    def __repr__(self) -> str:
        return "KEEP"


KEEP: Any = _Keep()


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def bump(previous: datetime, now: datetime) -> datetime:
    """
    Next updated_at for a record last touched at `previous`.

    Always strictly later than `previous`, even if the clock did not move.
    """
    if now > previous:
        return now
    return previous + timedelta(microseconds=1)


def encode_date(value: datetime | date | None) -> str | None:
    """Encode a date value as ISO-8601 (UTC offset included for datetimes)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return value.isoformat()


def decode_date(value: Any) -> datetime | None:
    """Decode an ISO-8601 string into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        # JavaScript's toISOString() writes a trailing Z
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise StorageError(f"Invalid timestamp {value!r}") from e
    else:
        raise StorageError(f"Invalid timestamp {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def created_date(data: dict) -> datetime:
    """The mandatory createdAt of a stored record."""
    created = decode_date(data.get("createdAt"))
    if created is None:
        raise StorageError(f"Record {data.get('id')!r} has no createdAt")
    return created


def encode_record(record: dict) -> dict:
    """Copy of `record` with date fields turned into ISO-8601 strings."""
    encoded = dict(record)
    for key in DATE_FIELDS:
        if key in encoded and isinstance(encoded[key], (datetime, date)):
            encoded[key] = encode_date(encoded[key])
    return encoded


def decode_record(record: dict) -> dict:
    """Copy of `record` with date fields turned back into datetimes."""
    if not isinstance(record, dict):
        raise StorageError(f"Expected a record object, got {type(record).__name__}")
    decoded = dict(record)
    for key in DATE_FIELDS:
        if key in decoded:
            decoded[key] = decode_date(decoded[key])
    return decoded


def normalize_tags(tags: list[str] | tuple[str, ...] | None) -> list[str]:
    """Strip tags, drop empties and duplicates, keep first-seen order."""
    seen: list[str] = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def upsert(records: list[dict], record: dict) -> tuple[list[dict], bool]:
    """
    Replace the record with the same id or append it.

    Returns (new list, inserted?). The input list is not modified.
    """
    updated = list(records)
    for i, existing in enumerate(updated):
        if existing.get("id") == record["id"]:
            updated[i] = record
            return updated, False
    updated.append(record)
    return updated, True
