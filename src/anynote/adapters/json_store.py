"""JSON record store adapters - file-backed and in-memory."""

import json
import logging
import os
import tempfile
from pathlib import Path

from anynote.core.errors import StorageError
from anynote.core.records import decode_record, encode_record
from anynote.ports.record_store import SESSION

logger = logging.getLogger(__name__)


class _JsonRecordStore:
    """
    Shared JSON encoding for key/value backed record stores.

    Subclasses provide raw text reads and writes per key. Everything is
    serialized before the write happens, so an encoding failure never
    touches stored data.
    """

    def _read(self, key: str) -> str | None:
        raise NotImplementedError

    def _write(self, key: str, text: str | None) -> None:
        raise NotImplementedError

    def _decode(self, key: str, text: str):
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored '{key}' data is corrupt: {e}") from e

    @staticmethod
    def _encode(key: str, data) -> str:
        try:
            return json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialize '{key}': {e}") from e

    def load(self, namespace: str) -> list[dict]:
        """Load all records in a namespace. Returns [] if it does not exist."""
        text = self._read(namespace)
        if text is None or not text.strip():
            return []
        data = self._decode(namespace, text)
        if not isinstance(data, list):
            raise StorageError(f"Stored '{namespace}' data is not a list")
        return [decode_record(r) for r in data]

    def save_all(self, namespace: str, records: list[dict]) -> None:
        """Replace the contents of a namespace."""
        text = self._encode(namespace, [encode_record(r) for r in records])
        self._write(namespace, text)
        logger.debug("Saved %d records to %s", len(records), namespace)

    def load_session(self) -> dict | None:
        text = self._read(SESSION)
        if text is None or not text.strip():
            return None
        data = self._decode(SESSION, text)
        if not isinstance(data, dict):
            raise StorageError("Stored session is not an object")
        return decode_record(data)

    def save_session(self, record: dict | None) -> None:
        if record is None:
            self._write(SESSION, None)
            return
        self._write(SESSION, self._encode(SESSION, encode_record(record)))


class JsonFileRecordStore(_JsonRecordStore):
    """
    Directory of JSON documents, one per namespace.

    Implements RecordStore protocol. Writes go to a temporary file that
    atomically replaces the target.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def _write(self, key: str, text: str | None) -> None:
        path = self._path_for(key)
        tmp_name = None
        try:
            if text is None:
                path.unlink(missing_ok=True)
                return
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Cannot write {path}: {e}") from e


class InMemoryRecordStore(_JsonRecordStore):
    """
    Process-local record store.

    Implements RecordStore protocol. Holds the same JSON text the file
    store would write, so dates round-trip identically.
    """

    def __init__(self):
        self._data: dict[str, str] = {}

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, text: str | None) -> None:
        if text is None:
            self._data.pop(key, None)
        else:
            self._data[key] = text
