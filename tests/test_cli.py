"""End-to-end tests for the click CLI against an in-memory store."""

import json

import pytest
from click.testing import CliRunner

from anynote.cli import main
from anynote.config import Config
from anynote.workflows import open_workspace


@pytest.fixture
def workspace(store, clock):
    return open_workspace(Config(), store=store, clock=clock)


@pytest.fixture
def run(workspace):
    runner = CliRunner()

    def _run(*args, input=None):
        return runner.invoke(main, list(args), obj=workspace, input=input)

    return _run


@pytest.fixture
def logged_in(run):
    result = run("register", "alice", "--password", "pw")
    assert result.exit_code == 0, result.output
    return run


def note_ids(run, *args):
    result = run("notes", "list", "--json", *args)
    assert result.exit_code == 0, result.output
    return [n["title"] for n in json.loads(result.output)]


class TestAccount:
    def test_register_shows_token(self, run):
        result = run("register", "alice", "--password", "pw")
        assert result.exit_code == 0
        assert "Recovery token:" in result.output

    def test_requires_login(self, run):
        result = run("notes", "list")
        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_login_failure(self, logged_in):
        logged_in("logout")
        result = logged_in("login", "alice", "--password", "nope")
        assert result.exit_code == 1
        assert "Invalid username or password" in result.output

    def test_whoami(self, logged_in):
        data = json.loads(logged_in("whoami", "--json").output)
        assert data["username"] == "alice"
        assert "passwordHash" not in data

    def test_recover(self, logged_in, workspace):
        token = workspace.auth.current_user().token
        logged_in("logout")
        assert "Not logged in." in logged_in("whoami").output
        result = logged_in("recover", token)
        assert result.exit_code == 0
        assert "alice" in result.output

    def test_profile_rename(self, logged_in):
        result = logged_in("profile", "--username", "alicia")
        assert result.exit_code == 0
        assert "alicia" in logged_in("whoami").output


class TestNotes:
    def test_add_list_pin(self, logged_in, workspace):
        logged_in("notes", "add", "--title", "Alpha", "--content", "first")
        logged_in("notes", "add", "--title", "Beta", "--content", "second", "-t", "work")
        beta = next(n for n in workspace.notes.notes if n.title == "Beta")

        assert note_ids(logged_in, "--sort", "title", "--order", "asc") == ["Alpha", "Beta"]

        result = logged_in("notes", "pin", "Alpha")
        assert result.exit_code == 1  # ids, not titles

        alpha = next(n for n in workspace.notes.notes if n.title == "Alpha")
        assert logged_in("notes", "pin", alpha.id[:8]).exit_code == 0
        assert note_ids(logged_in, "--sort", "title", "--order", "desc") == ["Alpha", "Beta"]
        assert note_ids(logged_in, "--tag", "work") == ["Beta"]
        assert logged_in("notes", "tags").output.split() == ["work"]
        assert logged_in("notes", "show", beta.id).output.startswith("# Beta")

    def test_add_invalid(self, logged_in):
        result = logged_in("notes", "add", "--title", "", "--content", "")
        assert result.exit_code == 1
        assert "needs a title or some content" in result.output

    def test_edit_and_rm(self, logged_in, workspace):
        logged_in("notes", "add", "--title", "Draft", "--content", "x", "--color", "blue")
        note = workspace.notes.notes[0]
        assert logged_in("notes", "edit", note.id, "--title", "Final", "--color", "default").exit_code == 0
        assert note_ids(logged_in) == ["Final"]
        assert logged_in("notes", "rm", note.id).exit_code == 0
        assert logged_in("notes", "rm", note.id).exit_code == 0
        assert note_ids(logged_in) == []

    def test_search(self, logged_in):
        logged_in("notes", "add", "--title", "Monday", "--content", "Team meeting notes")
        logged_in("notes", "add", "--title", "Shopping", "--content", "milk")
        assert note_ids(logged_in, "--search", "MEET") == ["Monday"]


class TestTasks:
    def test_add_done_list(self, logged_in, workspace):
        logged_in("notes", "add", "--title", "Outline", "--content", "x")
        note = workspace.notes.notes[0]
        result = logged_in("tasks", "add", "Review outline", "--note", note.id[:8], "--due", "2025-02-01")
        assert result.exit_code == 0, result.output

        task = workspace.tasks.tasks[0]
        assert task.linked_note_id == note.id
        assert "Completed" in logged_in("tasks", "done", task.id).output

        listing = logged_in("tasks", "list").output
        assert "[x]" in listing
        assert "-> Outline" in listing

        pending = json.loads(logged_in("tasks", "list", "--status", "pending", "--json").output)
        assert pending == []

    def test_broken_link_is_tolerated(self, logged_in, workspace):
        logged_in("tasks", "add", "Orphan", "--note", "gone")
        result = logged_in("tasks", "list")
        assert result.exit_code == 0
        assert "Orphan" in result.output

    def test_edit_and_rm(self, logged_in, workspace):
        logged_in("tasks", "add", "Draft", "-d", "words")
        task = workspace.tasks.tasks[0]
        assert logged_in("tasks", "edit", task.id, "--priority", "high", "-d", "").exit_code == 0
        updated = workspace.tasks.get(task.id)
        assert updated.priority == "high"
        assert updated.description is None
        assert logged_in("tasks", "rm", task.id).exit_code == 0
        assert workspace.tasks.tasks == []


class TestData:
    def test_export_import(self, logged_in, workspace, tmp_path):
        logged_in("notes", "add", "--title", "Keep", "--content", "x")
        path = tmp_path / "backup.json"

        result = logged_in("export", str(path))
        assert result.exit_code == 0
        doc = json.loads(path.read_text())
        assert [n["title"] for n in doc["notes"]] == ["Keep"]

        doc["notes"].append(dict(doc["notes"][0], id="new-one", title="Added"))
        path.write_text(json.dumps(doc))
        result = logged_in("import", str(path))
        assert result.exit_code == 0
        assert "Notes: 1 added, 1 updated" in result.output

    def test_import_invalid_json(self, logged_in, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")
        result = logged_in("import", str(path))
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_import_binary_file(self, logged_in, tmp_path):
        path = tmp_path / "photo.json"
        path.write_bytes(b"\xff\xfe\x00binary")
        result = logged_in("import", str(path))
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_wipe(self, logged_in, workspace):
        logged_in("notes", "add", "--title", "a", "--content", "x")
        logged_in("tasks", "add", "b")
        result = logged_in("wipe", "--yes")
        assert result.exit_code == 0
        assert "Deleted 1 notes and 1 tasks." in result.output

    def test_stats_json(self, logged_in):
        logged_in("notes", "add", "--title", "a", "--content", "x", "-t", "work")
        logged_in("tasks", "add", "b")
        data = json.loads(logged_in("stats", "--json").output)
        assert data["total_notes"] == 1
        assert data["total_tasks"] == 1
        assert data["top_tags"] == [{"tag": "work", "count": 1}]
