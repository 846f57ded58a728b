"""Record store interface."""

from typing import Protocol

USERS = "users"
NOTES = "notes"
TASKS = "tasks"
SESSION = "current_user"


class RecordStore(Protocol):
    """Interface for persisting arrays of records by namespace."""

    def load(self, namespace: str) -> list[dict]:
        """Load all records in a namespace. Returns [] if it does not exist."""
        ...

    def save_all(self, namespace: str, records: list[dict]) -> None:
        """Replace the contents of a namespace."""
        ...

    def load_session(self) -> dict | None:
        """Load the current-session user record, if any."""
        ...

    def save_session(self, record: dict | None) -> None:
        """Set or (with None) clear the current-session user record."""
        ...
