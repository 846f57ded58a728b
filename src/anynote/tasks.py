"""Task collection manager."""

import logging
from typing import Sequence

from .collection import RecordCollection
from .core.filters import SortKey, SortOrder, TaskStatus, view_tasks
from .core.notes import Note
from .core.tasks import Task, TaskForm, TaskPatch, apply_task_patch, new_task, resolve_linked_note
from .ports.record_store import TASKS

logger = logging.getLogger(__name__)


class TaskCollection(RecordCollection[Task]):
    """
    Tasks of the active user. Mutators return a Result.

    Linked note ids are stored as given and never checked; use
    linked_note() to resolve them, which tolerates broken links.
    """

    namespace = TASKS
    kind = "task"

    def _from_record(self, record: dict) -> Task:
        return Task.from_record(record)

    @property
    def tasks(self) -> list[Task]:
        return self.items

    def add(self, user_id: str, form: TaskForm):
        """Create an open task for `user_id`, switching the cache to that user."""
        return self._insert(user_id, lambda now: new_task(user_id, form, now))

    def update(self, task_id: str, patch: TaskPatch):
        return self._mutate(task_id, lambda task, now: apply_task_patch(task, patch, now))

    def toggle_completion(self, task_id: str):
        """Flip `completed` and bump updated_at."""
        return self._mutate(
            task_id,
            lambda task, now: apply_task_patch(task, TaskPatch(completed=not task.completed), now),
        )

    def linked_note(self, task: Task, notes: list[Note]) -> Note | None:
        note = resolve_linked_note(task, notes)
        if task.linked_note_id and note is None:
            logger.warning("Task %s links to missing note %s", task.id, task.linked_note_id)
        return note

    def view(
        self,
        search_term: str = "",
        selected_tags: Sequence[str] = (),
        status: TaskStatus | str = TaskStatus.ALL,
        sort_by: SortKey | str = SortKey.CREATED_AT,
        sort_order: SortOrder | str = SortOrder.DESC,
    ) -> list[Task]:
        """Filtered and sorted view of the cached tasks."""
        return view_tasks(self._items, search_term, selected_tags, status, sort_by, sort_order)
