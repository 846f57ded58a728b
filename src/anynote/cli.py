"""anynote CLI - notes and tasks organizer."""

import json
import logging
import sys
from datetime import date, timezone
from pathlib import Path

import click

from .config import load_config
from .core.errors import AnynoteError, Result
from .core.filters import SortKey, SortOrder, TaskStatus
from .core.notes import DEFAULT_COLOR, NOTE_COLORS, NoteForm, NotePatch
from .core.records import KEEP, encode_record
from .core.tasks import TASK_PRIORITIES, TaskForm, TaskPatch
from .workflows import (
    Workspace,
    account_summary,
    export_account,
    import_account,
    open_workspace,
    wipe_account,
)

SORT_CHOICES = click.Choice([k.value for k in SortKey])
ORDER_CHOICES = click.Choice([o.value for o in SortOrder])
COLOR_CHOICES = click.Choice([DEFAULT_COLOR, *NOTE_COLORS])
PRIORITY_CHOICES = click.Choice(TASK_PRIORITIES)
DUE_DATE = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"])


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _check(result: Result) -> Result:
    """Exit with the result's message if it failed."""
    if not result:
        _fail(result.error)
    return result


def _workspace(ctx: click.Context, require_user: bool = True) -> Workspace:
    workspace = ctx.obj
    if require_user:
        try:
            workspace.require_user()
        except AnynoteError as e:
            _fail(str(e))
    return workspace


def _as_utc(value):
    # Naive CLI datetimes are local time
    return value.astimezone(timezone.utc) if value is not None else None


def _dump(records: list[dict]) -> None:
    click.echo(json.dumps([encode_record(r) for r in records], indent=2, ensure_ascii=False))


@click.group()
@click.version_option(package_name="anynote")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """anynote - notes and tasks organizer."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    if ctx.obj is None:
        try:
            ctx.obj = open_workspace(load_config())
        except AnynoteError as e:
            _fail(str(e))


# ============== Account ==============


@main.command()
@click.argument("username")
@click.password_option()
@click.pass_context
def register(ctx, username: str, password: str):
    """Create an account and log in."""
    user = _check(_workspace(ctx, require_user=False).auth.register(username, password)).value
    click.echo(f"Welcome, {user.username}!")
    click.echo(f"Recovery token: {user.token}")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx, username: str, password: str):
    """Log in (rotates the recovery token)."""
    user = _check(_workspace(ctx, require_user=False).auth.login(username, password)).value
    click.echo(f"Logged in as {user.username}.")
    click.echo(f"Recovery token: {user.token}")


@main.command()
@click.pass_context
def logout(ctx):
    """Log out."""
    _workspace(ctx, require_user=False).auth.logout()
    click.echo("Logged out.")


@main.command()
@click.argument("token")
@click.pass_context
def recover(ctx, token: str):
    """Log in with a recovery token."""
    user = _check(_workspace(ctx, require_user=False).auth.recover_by_token(token)).value
    click.echo(f"Logged in as {user.username}.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def whoami(ctx, as_json: bool):
    """Show the logged-in user."""
    user = _workspace(ctx, require_user=False).auth.current_user()
    if as_json:
        click.echo(json.dumps(encode_record(user.public_record()) if user else None, indent=2))
        return
    if user is None:
        click.echo("Not logged in.")
        return
    click.echo(f"{user.username} (member since {user.created_at.date().isoformat()})")


@main.command()
@click.option("--username", default=None, help="New username")
@click.option("--password", "change_password", is_flag=True, help="Prompt for a new password")
@click.pass_context
def profile(ctx, username: str | None, change_password: bool):
    """Change username and/or password."""
    workspace = _workspace(ctx)
    if username is None and not change_password:
        _fail("Nothing to change. Pass --username and/or --password.")
    password = None
    if change_password:
        password = click.prompt("New password", hide_input=True, confirmation_prompt=True)
    user = _check(workspace.auth.update_profile(username=username, password=password)).value
    click.echo(f"Profile updated for {user.username}.")


# ============== Notes ==============


@main.group()
def notes():
    """Manage notes."""
    pass


@notes.command("list")
@click.option("--search", "-s", default="", help="Case-insensitive text search")
@click.option("--tag", "-t", "tags", multiple=True, help="Only notes with every given tag")
@click.option("--sort", "sort_by", type=SORT_CHOICES, default=None)
@click.option("--order", "sort_order", type=ORDER_CHOICES, default=None)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def notes_list(ctx, search: str, tags: tuple[str, ...], sort_by, sort_order, as_json: bool):
    """List notes, pinned first."""
    workspace = _workspace(ctx)
    config = workspace.config
    view = workspace.notes.view(
        search,
        tags,
        sort_by or config.note_sort_by,
        sort_order or config.note_sort_order,
    )

    if as_json:
        _dump([n.to_record() for n in view])
        return

    if not view:
        click.echo("No notes." if not workspace.notes.notes else "No notes match.")
        return

    for note in view:
        pin = "*" if note.is_pinned else " "
        tag_str = f" [{', '.join(note.tags)}]" if note.tags else ""
        color = f" ({note.color})" if note.color else ""
        click.echo(f"{pin} {note.id[:8]}  {note.title or '(untitled)'}{tag_str}{color}")
    click.echo(f"\n{len(view)} of {len(workspace.notes.notes)} notes")


@notes.command("show")
@click.argument("note_id")
@click.pass_context
def notes_show(ctx, note_id: str):
    """Show a note in full."""
    workspace = _workspace(ctx)
    note = _find(workspace.notes, note_id)
    click.echo(f"# {note.title or '(untitled)'}")
    if note.tags:
        click.echo(f"Tags: {', '.join(note.tags)}")
    click.echo(f"Updated: {note.updated_at.isoformat()}")
    click.echo()
    click.echo(note.content)


@notes.command("add")
@click.option("--title", default="", help="Note title")
@click.option("--content", default=None, help="Note body (opens an editor if omitted)")
@click.option("--tag", "-t", "tags", multiple=True)
@click.option("--color", type=COLOR_CHOICES, default=None)
@click.pass_context
def notes_add(ctx, title: str, content: str | None, tags: tuple[str, ...], color: str | None):
    """Create a note."""
    workspace = _workspace(ctx)
    if content is None:
        content = click.edit("") or ""
    form = NoteForm(title=title, content=content, tags=list(tags), color=color)
    note = _check(workspace.notes.add(workspace.notes.user_id, form)).value
    click.echo(f"Created note {note.id}")


@notes.command("edit")
@click.argument("note_id")
@click.option("--title", default=None)
@click.option("--content", default=None)
@click.option("--tag", "-t", "tags", multiple=True, help="Replace tags")
@click.option("--clear-tags", is_flag=True)
@click.option("--color", type=COLOR_CHOICES, default=None, help="'default' removes the color")
@click.pass_context
def notes_edit(ctx, note_id: str, title, content, tags, clear_tags: bool, color):
    """Edit a note."""
    workspace = _workspace(ctx)
    note = _find(workspace.notes, note_id)
    patch = NotePatch(
        title=title if title is not None else KEEP,
        content=content if content is not None else KEEP,
        tags=[] if clear_tags else (list(tags) if tags else KEEP),
        color=color if color is not None else KEEP,
    )
    _check(workspace.notes.update(note.id, patch))
    click.echo(f"Updated note {note.id}")


@notes.command("rm")
@click.argument("note_id")
@click.pass_context
def notes_rm(ctx, note_id: str):
    """Delete a note."""
    workspace = _workspace(ctx)
    note = _match(workspace.notes, note_id)
    _check(workspace.notes.delete(note.id if note else note_id))
    click.echo("Deleted.")


@notes.command("pin")
@click.argument("note_id")
@click.pass_context
def notes_pin(ctx, note_id: str):
    """Pin or unpin a note."""
    workspace = _workspace(ctx)
    note = _find(workspace.notes, note_id)
    note = _check(workspace.notes.toggle_pin(note.id)).value
    click.echo(f"{'Pinned' if note.is_pinned else 'Unpinned'} {note.title or note.id}")


@notes.command("tags")
@click.pass_context
def notes_tags(ctx):
    """List every tag in use."""
    for tag in _workspace(ctx).notes.all_tags():
        click.echo(tag)


# ============== Tasks ==============


@main.group()
def tasks():
    """Manage tasks."""
    pass


@tasks.command("list")
@click.option("--search", "-s", default="")
@click.option("--tag", "-t", "tags", multiple=True)
@click.option("--status", type=click.Choice([s.value for s in TaskStatus]), default="all")
@click.option("--sort", "sort_by", type=SORT_CHOICES, default=None)
@click.option("--order", "sort_order", type=ORDER_CHOICES, default=None)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tasks_list(ctx, search: str, tags, status: str, sort_by, sort_order, as_json: bool):
    """List tasks."""
    workspace = _workspace(ctx)
    config = workspace.config
    view = workspace.tasks.view(
        search,
        tags,
        status,
        sort_by or config.task_sort_by,
        sort_order or config.task_sort_order,
    )

    if as_json:
        _dump([t.to_record() for t in view])
        return

    if not view:
        click.echo("No tasks." if not workspace.tasks.tasks else "No tasks match.")
        return

    notes = workspace.notes.notes
    for task in view:
        box = "x" if task.completed else " "
        due = f" (due {task.due_date.date().isoformat()})" if task.due_date else ""
        linked = workspace.tasks.linked_note(task, notes)
        link = f" -> {linked.title or linked.id[:8]}" if linked else ""
        click.echo(f"[{box}] {task.id[:8]}  {task.title} ({task.priority}){due}{link}")


@tasks.command("add")
@click.argument("title")
@click.option("--description", "-d", default=None)
@click.option("--priority", type=PRIORITY_CHOICES, default="medium")
@click.option("--due", type=DUE_DATE, default=None)
@click.option("--note", "note_id", default=None, help="Link to a note id")
@click.option("--tag", "-t", "tags", multiple=True)
@click.pass_context
def tasks_add(ctx, title: str, description, priority: str, due, note_id, tags):
    """Create a task."""
    workspace = _workspace(ctx)
    if note_id:
        linked = _match(workspace.notes, note_id)
        note_id = linked.id if linked else note_id
    form = TaskForm(
        title=title,
        description=description,
        priority=priority,
        due_date=_as_utc(due),
        linked_note_id=note_id,
        tags=list(tags),
    )
    task = _check(workspace.tasks.add(workspace.tasks.user_id, form)).value
    click.echo(f"Created task {task.id}")


@tasks.command("edit")
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", "-d", default=None, help="Empty string clears it")
@click.option("--priority", type=PRIORITY_CHOICES, default=None)
@click.option("--due", type=DUE_DATE, default=None)
@click.option("--clear-due", is_flag=True)
@click.option("--note", "note_id", default=None, help="Empty string unlinks")
@click.option("--tag", "-t", "tags", multiple=True, help="Replace tags")
@click.pass_context
def tasks_edit(ctx, task_id: str, title, description, priority, due, clear_due: bool, note_id, tags):
    """Edit a task."""
    workspace = _workspace(ctx)
    task = _find(workspace.tasks, task_id)
    patch = TaskPatch(
        title=title if title is not None else KEEP,
        description=description if description is not None else KEEP,
        priority=priority if priority is not None else KEEP,
        due_date=None if clear_due else (_as_utc(due) if due is not None else KEEP),
        linked_note_id=note_id if note_id is not None else KEEP,
        tags=list(tags) if tags else KEEP,
    )
    _check(workspace.tasks.update(task.id, patch))
    click.echo(f"Updated task {task.id}")


@tasks.command("done")
@click.argument("task_id")
@click.pass_context
def tasks_done(ctx, task_id: str):
    """Toggle a task's completion."""
    workspace = _workspace(ctx)
    task = _find(workspace.tasks, task_id)
    task = _check(workspace.tasks.toggle_completion(task.id)).value
    click.echo(f"{'Completed' if task.completed else 'Reopened'}: {task.title}")


@tasks.command("rm")
@click.argument("task_id")
@click.pass_context
def tasks_rm(ctx, task_id: str):
    """Delete a task."""
    workspace = _workspace(ctx)
    task = _match(workspace.tasks, task_id)
    _check(workspace.tasks.delete(task.id if task else task_id))
    click.echo("Deleted.")


def _match(collection, prefix: str):
    """Record whose id equals or uniquely starts with `prefix`."""
    exact = collection.get(prefix)
    if exact is not None:
        return exact
    matches = [i for i in collection.items if i.id.startswith(prefix)]
    if len(matches) > 1:
        _fail(f"Ambiguous id '{prefix}'")
    return matches[0] if matches else None


def _find(collection, prefix: str):
    item = _match(collection, prefix)
    if item is None:
        _fail(f"No {collection.kind} with id {prefix}")
    return item


# ============== Data ==============


@main.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.pass_context
def export_cmd(ctx, path: Path | None):
    """Export your notes and tasks as JSON."""
    workspace = _workspace(ctx)
    document = export_account(workspace)
    text = json.dumps(document, indent=2, ensure_ascii=False)
    if path is None:
        user = workspace.auth.current_user()
        path = Path(f"anynote-backup-{user.username}-{date.today().isoformat()}.json")
    path.write_text(text, encoding="utf-8")
    click.echo(f"Exported {len(document['notes'])} notes and {len(document['tasks'])} tasks to {path}")


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_cmd(ctx, path: Path):
    """Import notes and tasks from an export file."""
    workspace = _workspace(ctx)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        _fail(f"{path} is not valid JSON: {e}")
    summary = _check(import_account(workspace, document)).value
    click.echo(
        f"Notes: {summary.notes_inserted} added, {summary.notes_updated} updated. "
        f"Tasks: {summary.tasks_inserted} added, {summary.tasks_updated} updated."
    )


@main.command()
@click.confirmation_option(prompt="Delete all of your notes and tasks?")
@click.pass_context
def wipe(ctx):
    """Delete all of your notes and tasks."""
    workspace = _workspace(ctx)
    notes_removed, tasks_removed = _check(wipe_account(workspace)).value
    click.echo(f"Deleted {notes_removed} notes and {tasks_removed} tasks.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats(ctx, as_json: bool):
    """Account statistics."""
    workspace = _workspace(ctx)
    s = account_summary(workspace)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "total_notes": s.total_notes,
                    "pinned_notes": s.pinned_notes,
                    "total_tasks": s.tasks.total,
                    "completed_tasks": s.tasks.completed,
                    "pending_tasks": s.tasks.pending,
                    "completion_rate": s.tasks.completion_rate,
                    "overdue_tasks": s.overdue_tasks,
                    "recent_notes": s.recent_notes,
                    "recent_tasks": s.recent_tasks,
                    "top_tags": [{"tag": t, "count": c} for t, c in s.top_tags],
                    "last_activity": s.last_activity.isoformat() if s.last_activity else None,
                },
                indent=2,
            )
        )
        return

    days = workspace.config.recent_days
    click.echo(f"Notes:  {s.total_notes} ({s.pinned_notes} pinned, {s.recent_notes} in the last {days}d)")
    click.echo(
        f"Tasks:  {s.tasks.completed}/{s.tasks.total} done ({s.tasks.completion_rate}%), "
        f"{s.overdue_tasks} overdue, {s.recent_tasks} in the last {days}d"
    )
    if s.top_tags:
        click.echo("Top tags: " + ", ".join(f"{t} ({c})" for t, c in s.top_tags))
    if s.last_activity:
        click.echo(f"Last activity: {s.last_activity.isoformat()}")


if __name__ == "__main__":
    main()
