"""Tests for the filter/sort engine."""

from datetime import datetime, timedelta, timezone

import pytest

from anynote.core.errors import ValidationError
from anynote.core.filters import (
    SortKey,
    SortOrder,
    all_tags,
    collation_key,
    filter_by_search,
    filter_by_status,
    filter_by_tags,
    pinned_first,
    sort_items,
    view_notes,
    view_tasks,
)
from anynote.core.notes import Note
from anynote.core.tasks import Task

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_note(id, title="", content="", tags=(), pinned=False, created=0, updated=None):
    created_at = T0 + timedelta(hours=created)
    updated_at = T0 + timedelta(hours=updated if updated is not None else created)
    return Note(
        id=id,
        user_id="u1",
        title=title,
        content=content,
        created_at=created_at,
        updated_at=updated_at,
        tags=list(tags),
        is_pinned=pinned,
    )


def make_task(id, title="", description=None, tags=(), completed=False, created=0):
    at = T0 + timedelta(hours=created)
    return Task(
        id=id,
        user_id="u1",
        title=title,
        created_at=at,
        updated_at=at,
        description=description,
        completed=completed,
        tags=list(tags),
    )


def ids(items):
    return [i.id for i in items]


@pytest.fixture
def notes():
    return [
        make_note("a", "Groceries", "milk, eggs", tags=["home"], created=1),
        make_note("b", "Sprint review", "Team meeting notes", tags=["work", "meetings"], created=2),
        make_note("c", "Ideas", "", tags=["work"], created=3),
    ]


class TestSearch:
    def test_empty_term_passes_everything(self, notes):
        assert ids(filter_by_search(notes, "")) == ["a", "b", "c"]

    def test_matches_content_case_insensitively(self, notes):
        assert ids(filter_by_search(notes, "MEET")) == ["b"]

    def test_matches_title(self, notes):
        assert ids(filter_by_search(notes, "groc")) == ["a"]

    def test_matches_tag_text(self, notes):
        assert ids(filter_by_search(notes, "hom")) == ["a"]

    def test_meet_matches_note_and_task(self):
        note = make_note("n", "Monday", "Team meeting notes")
        task = make_task("t", "Calendar", description="Schedule meeting")
        assert ids(filter_by_search([note], "meet")) == ["n"]
        assert ids(filter_by_search([task], "meet")) == ["t"]

    def test_task_without_description(self):
        assert filter_by_search([make_task("t", "Call mom")], "meeting") == []


class TestTags:
    def test_empty_selection_is_identity(self, notes):
        assert ids(filter_by_tags(notes, [])) == ids(notes)

    def test_intersection_not_union(self):
        only_a = make_note("x", tags=["a"])
        both = make_note("y", tags=["b", "a"])
        assert ids(filter_by_tags([only_a, both], ["a", "b"])) == ["y"]

    def test_tag_match_is_exact(self, notes):
        assert filter_by_tags(notes, ["Work"]) == []


class TestSort:
    def test_updated_desc(self, notes):
        assert ids(sort_items(notes, "updatedAt", "desc")) == ["c", "b", "a"]

    def test_created_asc(self, notes):
        assert ids(sort_items(notes, SortKey.CREATED_AT, SortOrder.ASC)) == ["a", "b", "c"]

    def test_title_ignores_case_and_accents(self):
        items = [make_note("1", "banana"), make_note("2", "Éclair"), make_note("3", "apple")]
        assert ids(sort_items(items, "title", "asc")) == ["3", "1", "2"]

    def test_stable_for_equal_keys_both_directions(self):
        items = [make_note(str(i), created=0) for i in range(5)]
        assert ids(sort_items(items, "createdAt", "asc")) == ["0", "1", "2", "3", "4"]
        assert ids(sort_items(items, "createdAt", "desc")) == ["0", "1", "2", "3", "4"]

    def test_input_not_mutated(self, notes):
        before = ids(notes)
        sort_items(notes, "title", "desc")
        assert ids(notes) == before

    def test_invalid_key(self, notes):
        with pytest.raises(ValidationError):
            sort_items(notes, "priority")

    def test_collation_key_orders_accent_after_plain(self):
        assert collation_key("e") < collation_key("é")


class TestPinPriority:
    def test_pinned_first_keeps_sort_within_groups(self):
        a = make_note("A", pinned=True, updated=1)
        b = make_note("B", pinned=False, updated=3)
        c = make_note("C", pinned=True, updated=2)
        # Each group follows the requested updatedAt desc order
        result = view_notes([a, b, c], sort_by="updatedAt", sort_order="desc")
        assert ids(result) == ["C", "A", "B"]

    def test_partition_only(self):
        a = make_note("A", pinned=True)
        b = make_note("B")
        c = make_note("C", pinned=True)
        assert ids(pinned_first([a, b, c])) == ["A", "C", "B"]

    def test_pinned_first_ascending(self):
        a = make_note("A", pinned=True, updated=1)
        b = make_note("B", pinned=False, updated=3)
        c = make_note("C", pinned=True, updated=2)
        assert ids(view_notes([a, b, c], sort_by="updatedAt", sort_order="asc")) == ["A", "C", "B"]


class TestViews:
    def test_view_notes_combines_filters(self, notes):
        result = view_notes(notes, search_term="e", selected_tags=["work"], sort_by="title", sort_order="asc")
        assert ids(result) == ["c", "b"]

    def test_view_tasks_status(self):
        tasks = [
            make_task("1", "a", completed=True, created=1),
            make_task("2", "b", created=2),
            make_task("3", "c", completed=True, created=3),
        ]
        assert ids(view_tasks(tasks, status="completed")) == ["3", "1"]
        assert ids(view_tasks(tasks, status="pending")) == ["2"]
        assert ids(view_tasks(tasks)) == ["3", "2", "1"]

    def test_filter_by_status_rejects_unknown(self):
        with pytest.raises(ValidationError):
            filter_by_status([], "done")


class TestAllTags:
    def test_sorted_union(self, notes):
        assert all_tags(notes) == ["home", "meetings", "work"]

    def test_empty(self):
        assert all_tags([]) == []
