"""Note collection manager."""

from typing import Sequence

from .collection import RecordCollection
from .core.filters import SortKey, SortOrder, view_notes
from .core.notes import Note, NoteForm, NotePatch, apply_note_patch, new_note
from .ports.record_store import NOTES


class NoteCollection(RecordCollection[Note]):
    """Notes of the active user. Mutators return a Result."""

    namespace = NOTES
    kind = "note"

    def _from_record(self, record: dict) -> Note:
        return Note.from_record(record)

    @property
    def notes(self) -> list[Note]:
        return self.items

    def add(self, user_id: str, form: NoteForm):
        """Create an unpinned note for `user_id`, switching the cache to that user."""
        return self._insert(user_id, lambda now: new_note(user_id, form, now))

    def update(self, note_id: str, patch: NotePatch):
        """Merge `patch` into an existing note. Fails with not_found if absent."""
        return self._mutate(note_id, lambda note, now: apply_note_patch(note, patch, now))

    def toggle_pin(self, note_id: str):
        return self._mutate(
            note_id, lambda note, now: apply_note_patch(note, NotePatch(is_pinned=not note.is_pinned), now)
        )

    def view(
        self,
        search_term: str = "",
        selected_tags: Sequence[str] = (),
        sort_by: SortKey | str = SortKey.UPDATED_AT,
        sort_order: SortOrder | str = SortOrder.DESC,
    ) -> list[Note]:
        """Filtered, sorted, pinned-first view of the cached notes."""
        return view_notes(self._items, search_term, selected_tags, sort_by, sort_order)
