"""Account statistics - pure aggregation over a user's notes and tasks."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .notes import Note
from .tasks import Task


@dataclass
class TaskStats:
    total: int
    completed: int
    pending: int
    completion_rate: int  # whole percent


@dataclass
class AccountStats:
    """Summary shown on the profile page."""

    total_notes: int
    pinned_notes: int
    tasks: TaskStats
    overdue_tasks: int
    recent_notes: int
    recent_tasks: int
    top_tags: list[tuple[str, int]] = field(default_factory=list)
    last_activity: datetime | None = None


def task_stats(tasks: list[Task]) -> TaskStats:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    rate = int(completed * 100 / total + 0.5) if total else 0
    return TaskStats(total=total, completed=completed, pending=total - completed, completion_rate=rate)


def top_tags(notes: list[Note], limit: int = 5) -> list[tuple[str, int]]:
    """Most used note tags, most frequent first; ties by first appearance."""
    counts = Counter(tag for note in notes for tag in note.tags)
    return counts.most_common(limit)


def account_stats(
    notes: list[Note],
    tasks: list[Task],
    as_of: datetime,
    recent_days: int = 7,
    tag_limit: int = 5,
) -> AccountStats:
    """Aggregate counts, recent activity and top tags."""
    since = as_of - timedelta(days=recent_days)
    stamps = [n.updated_at for n in notes] + [t.updated_at for t in tasks]
    return AccountStats(
        total_notes=len(notes),
        pinned_notes=sum(1 for n in notes if n.is_pinned),
        tasks=task_stats(tasks),
        overdue_tasks=sum(1 for t in tasks if t.is_overdue(as_of)),
        recent_notes=sum(1 for n in notes if n.created_at > since),
        recent_tasks=sum(1 for t in tasks if t.created_at > since),
        top_tags=top_tags(notes, tag_limit),
        last_activity=max(stamps) if stamps else None,
    )
