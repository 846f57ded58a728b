"""Per-user record collections backed by a RecordStore."""

import logging
from datetime import datetime
from typing import Callable, Generic, TypeVar

from .core.errors import AnynoteError, NotFound, Result, StorageError, ValidationError
from .core.filters import all_tags
from .core.records import upsert, utcnow
from .ports.record_store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordCollection(Generic[T]):
    """
    In-memory cache of one user's records in a namespace.

    The store is authoritative: every mutation re-reads the namespace,
    writes the whole array back, and only then refreshes the cache.
    Public mutators return a Result instead of raising.
    """

    namespace: str = ""
    kind: str = "record"

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock
        self.user_id: str | None = None
        self._items: list[T] = []

    # ---- decoding hooks ----

    def _from_record(self, record: dict) -> T:
        raise NotImplementedError

    # ---- reads ----

    def load_for_user(self, user_id: str) -> list[T]:
        """Cache every stored record owned by `user_id`."""
        self.user_id = user_id
        self._refresh(self.store.load(self.namespace))
        logger.debug("Loaded %d %ss for user %s", len(self._items), self.kind, user_id)
        return list(self._items)

    @property
    def items(self) -> list[T]:
        return list(self._items)

    def get(self, item_id: str) -> T | None:
        return next((i for i in self._items if i.id == item_id), None)

    def all_tags(self) -> list[str]:
        return all_tags(self._items)

    def clear(self) -> None:
        """Forget the cached user (e.g. on logout)."""
        self.user_id = None
        self._items = []

    # ---- mutations ----

    def delete(self, item_id: str) -> Result:
        """Remove a record. Deleting an unknown id succeeds and changes nothing."""
        try:
            records = self.store.load(self.namespace)
            remaining = [r for r in records if not self._owns(r, item_id)]
            if len(remaining) == len(records):
                logger.debug("Delete of unknown %s %s ignored", self.kind, item_id)
                return Result.success()
            self._commit(remaining)
        except AnynoteError as e:
            return Result.failure(e)
        logger.debug("Deleted %s %s", self.kind, item_id)
        return Result.success()

    def delete_all(self) -> Result:
        """Remove every record of the loaded user. Returns the count removed."""
        if self.user_id is None:
            return Result.success(0)
        try:
            records = self.store.load(self.namespace)
            remaining = [r for r in records if r.get("userId") != self.user_id]
            self._commit(remaining)
        except AnynoteError as e:
            return Result.failure(e)
        return Result.success(len(records) - len(remaining))

    def _insert(self, user_id: str, build: Callable[[datetime], T]) -> Result:
        try:
            if user_id != self.user_id:
                self.load_for_user(user_id)
            item = build(self.clock())
            records = self.store.load(self.namespace)
            records, _ = upsert(records, item.to_record())
            self._commit(records)
        except AnynoteError as e:
            return Result.failure(e)
        logger.debug("Added %s %s", self.kind, item.id)
        return Result.success(item)

    def _mutate(self, item_id: str, change: Callable[[T, datetime], T]) -> Result:
        """Apply `change` to one owned record and persist it."""
        try:
            records = self.store.load(self.namespace)
            index = next(
                (i for i, r in enumerate(records) if self._owns(r, item_id)), None
            )
            if index is None:
                raise NotFound(f"No {self.kind} with id {item_id}")
            updated = change(self._decode(records[index]), self.clock())
            records = list(records)
            records[index] = updated.to_record()
            self._commit(records)
        except AnynoteError as e:
            return Result.failure(e)
        logger.debug("Updated %s %s", self.kind, item_id)
        return Result.success(updated)

    # ---- internals ----

    def _decode(self, record: dict) -> T:
        try:
            return self._from_record(record)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise StorageError(f"Unreadable {self.kind} record {record.get('id')!r}: {e}") from e

    def _owns(self, record: dict, item_id: str) -> bool:
        return (
            self.user_id is not None
            and record.get("id") == item_id
            and record.get("userId") == self.user_id
        )

    def _commit(self, records: list[dict]) -> None:
        self.store.save_all(self.namespace, records)
        self._refresh(records)

    def _refresh(self, records: list[dict]) -> None:
        if self.user_id is None:
            self._items = []
            return
        self._items = [
            self._decode(r) for r in records if r.get("userId") == self.user_id
        ]
