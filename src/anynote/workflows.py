"""Shared workflow layer between the CLI and the collection managers.

A Workspace is built once per process and passed to whatever needs it;
there are no module-level caches.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .adapters.json_store import JsonFileRecordStore
from .auth import AuthGate
from .config import Config
from .core.backup import ImportSummary, build_export, parse_import
from .core.errors import AnynoteError, NotAuthenticated, Result
from .core.records import upsert, utcnow
from .core.stats import AccountStats, account_stats
from .core.users import User
from .notes import NoteCollection
from .ports.record_store import NOTES, TASKS, RecordStore
from .tasks import TaskCollection

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Store, auth gate and managers for one session."""

    config: Config
    store: RecordStore
    auth: AuthGate
    notes: NoteCollection
    tasks: TaskCollection
    clock: Callable[[], datetime] = utcnow

    def load_current_user(self) -> User | None:
        """Point both managers at the signed-in user (or clear them)."""
        user = self.auth.current_user()
        if user is None:
            self.notes.clear()
            self.tasks.clear()
            return None
        self.notes.load_for_user(user.id)
        self.tasks.load_for_user(user.id)
        return user

    def require_user(self) -> User:
        user = self.load_current_user()
        if user is None:
            raise NotAuthenticated("Not logged in. Run 'anynote login' first.")
        return user


def get_store(config: Config) -> JsonFileRecordStore:
    """Resolve the record store directory from config."""
    return JsonFileRecordStore(config.data_path)


def open_workspace(
    config: Config,
    store: RecordStore | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> Workspace:
    """Wire a workspace and load the signed-in user's records."""
    store = store if store is not None else get_store(config)
    workspace = Workspace(
        config=config,
        store=store,
        auth=AuthGate(store, clock),
        notes=NoteCollection(store, clock),
        tasks=TaskCollection(store, clock),
        clock=clock,
    )
    workspace.load_current_user()
    return workspace


def export_account(workspace: Workspace) -> dict:
    """Export document for the signed-in user."""
    user = workspace.require_user()
    return build_export(user, workspace.notes.notes, workspace.tasks.tasks, workspace.clock())


def import_account(workspace: Workspace, document) -> Result:
    """
    Upsert notes and tasks from an export document into the signed-in account.

    The whole document is validated first; nothing is written if it is
    malformed. Returns a Result carrying an ImportSummary.
    """
    try:
        user = workspace.require_user()
        notes, tasks = parse_import(document, user.id)

        summary = ImportSummary()
        if notes:
            records = workspace.store.load(NOTES)
            for note in notes:
                records, inserted = upsert(records, note.to_record())
                if inserted:
                    summary.notes_inserted += 1
                else:
                    summary.notes_updated += 1
            workspace.store.save_all(NOTES, records)
        if tasks:
            records = workspace.store.load(TASKS)
            for task in tasks:
                records, inserted = upsert(records, task.to_record())
                if inserted:
                    summary.tasks_inserted += 1
                else:
                    summary.tasks_updated += 1
            workspace.store.save_all(TASKS, records)
    except AnynoteError as e:
        return Result.failure(e)
    finally:
        workspace.load_current_user()

    logger.info(
        "Imported %d notes and %d tasks for %s",
        len(notes),
        len(tasks),
        user.username,
    )
    return Result.success(summary)


def wipe_account(workspace: Workspace) -> Result:
    """Delete every note and task of the signed-in user."""
    try:
        workspace.require_user()
    except AnynoteError as e:
        return Result.failure(e)

    notes_result = workspace.notes.delete_all()
    if not notes_result:
        return notes_result
    tasks_result = workspace.tasks.delete_all()
    if not tasks_result:
        return tasks_result
    return Result.success((notes_result.value, tasks_result.value))


def account_summary(workspace: Workspace) -> AccountStats:
    workspace.require_user()
    return account_stats(
        workspace.notes.notes,
        workspace.tasks.tasks,
        workspace.clock(),
        recent_days=workspace.config.recent_days,
        tag_limit=workspace.config.top_tags,
    )
