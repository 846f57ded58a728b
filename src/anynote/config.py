"""Configuration management for anynote."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ANYNOTE_HOME = Path(os.environ.get("ANYNOTE_HOME", Path.home() / "anynote"))
CONFIG_FILE = ANYNOTE_HOME / "config" / "anynote.conf"
DATA_DIR = ANYNOTE_HOME / "data"

SORT_KEYS = ("createdAt", "updatedAt", "title")
SORT_ORDERS = ("asc", "desc")


@dataclass
class Config:
    """anynote configuration."""

    data_dir: str = ""
    note_sort_by: str = "updatedAt"
    note_sort_order: str = "desc"
    task_sort_by: str = "createdAt"
    task_sort_order: str = "desc"
    recent_days: int = 7
    top_tags: int = 5

    @property
    def data_path(self) -> Path:
        """Resolved record store directory."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _choice(key: str, value: str, choices: tuple[str, ...], default: str) -> str:
    if value in choices:
        return value
    logger.warning(f"Ignoring {key.upper()}={value!r}; expected one of {', '.join(choices)}")
    return default


def _positive_int(key: str, value: str, default: int) -> int:
    try:
        number = int(value)
    except ValueError:
        number = 0
    if number > 0:
        return number
    logger.warning(f"Ignoring {key.upper()}={value!r}; expected a positive integer")
    return default


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from anynote.conf (or `path`)."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "note_sort_by":
                config.note_sort_by = _choice(key, value, SORT_KEYS, config.note_sort_by)
            case "note_sort_order":
                config.note_sort_order = _choice(key, value, SORT_ORDERS, config.note_sort_order)
            case "task_sort_by":
                config.task_sort_by = _choice(key, value, SORT_KEYS, config.task_sort_by)
            case "task_sort_order":
                config.task_sort_order = _choice(key, value, SORT_ORDERS, config.task_sort_order)
            case "recent_days":
                config.recent_days = _positive_int(key, value, config.recent_days)
            case "top_tags":
                config.top_tags = _positive_int(key, value, config.top_tags)
            case _:
                logger.warning(f"Unknown config key {key.upper()}")

    return config
