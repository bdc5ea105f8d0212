"""
Day-scoped ordering rules - no I/O dependencies.

A day's visible order is its tasks sorted by position, split into an
incomplete and a complete block, with the blocks concatenated in the chosen
group order. Every structural mutation renumbers positions to 1.0, 2.0, ...
in visible order so values never drift or collide.

Completion toggles re-derive the order from the day's creation-time baseline
(position only breaks ties within a batch), so a task that changes group
settles among its new siblings by when it was created. Manual reorders hold
until the next toggle.

Functions here mutate `position` (and `is_completed` for toggles) in place;
persisting the result is the caller's job.
"""

import logging
from collections.abc import Collection, Iterable
from datetime import datetime

from .tasks import Task
from .undo import DeletedTask

logger = logging.getLogger(__name__)


def partition(ordered: Iterable[Task], completed_first: bool = False) -> list[Task]:
    """Split an ordered sequence into completion blocks, keeping relative order."""
    ordered = list(ordered)
    incomplete = [t for t in ordered if not t.is_completed]
    complete = [t for t in ordered if t.is_completed]
    if completed_first:
        return complete + incomplete
    return incomplete + complete


def visible_order(day_tasks: Iterable[Task], completed_first: bool = False) -> list[Task]:
    """
    Partition a day's tasks into completion blocks.

    Each block keeps its relative order by position (creation time breaks ties).
    Pure function - no I/O.
    """
    return partition(sorted(day_tasks, key=lambda t: (t.position, t.created_at)), completed_first)


def baseline_order(day_tasks: Iterable[Task], completed_first: bool = False) -> list[Task]:
    """
    Partition a day's tasks taken in creation order.

    Tasks created together (same timestamp) keep their position order.
    Pure function - no I/O.
    """
    return partition(sorted(day_tasks, key=lambda t: (t.created_at, t.position)), completed_first)


def renumber(ordered: list[Task]) -> list[Task]:
    """Reissue positions 1.0, 2.0, ... in the given sequence."""
    for index, task in enumerate(ordered, start=1):
        task.position = float(index)
    return ordered


def normalize(day_tasks: Iterable[Task], completed_first: bool = False) -> list[Task]:
    """Compute the visible order and renumber it."""
    return renumber(visible_order(day_tasks, completed_first))


def next_position(day_tasks: Iterable[Task]) -> float:
    """One past the highest position of the day (1.0 for an empty day)."""
    return max((t.position for t in day_tasks), default=0.0) + 1


def create_tasks(
    titles: Iterable[str],
    created_at: datetime,
    day_tasks: list[Task],
    completed_first: bool = False,
    is_daily: bool = False,
) -> list[Task]:
    """
    Append new tasks to the end of the day, in title order.

    Blank titles are skipped. Returns only the new tasks; the whole day
    (old and new) is renumbered.
    """
    position = next_position(day_tasks)
    created = []
    for title in titles:
        if not title.strip():
            continue
        created.append(
            Task(title=title, created_at=created_at, position=position, is_daily=is_daily)
        )
        position += 1

    if created:
        normalize([*day_tasks, *created], completed_first)
    return created


def toggle_completion(
    task: Task,
    day_tasks: list[Task],
    completed_first: bool = False,
) -> list[Task]:
    """
    Flip completion and move the task into its new group.

    The task takes the next position among its new siblings, then the day is
    renumbered from its creation-time baseline: a task created with others in
    one batch falls to the bottom of them, an older task settles above newer
    ones. Returns the renumbered visible order.
    """
    task.is_completed = not task.is_completed
    siblings = [
        t for t in day_tasks if t.is_completed == task.is_completed and t.id != task.id
    ]
    task.position = max((t.position for t in siblings), default=0.0) + 1

    if all(t.id != task.id for t in day_tasks):
        day_tasks = [*day_tasks, task]
    return renumber(baseline_order(day_tasks, completed_first))


def move_items(items: list[Task], source: Collection[int], destination: int) -> list[Task]:
    """
    Move the items at `source` indices so they land before `destination`.

    `destination` indexes the list before removal; moved items keep their order.
    """
    picked = set(source)
    moving = [items[i] for i in sorted(picked)]
    kept = [t for i, t in enumerate(items) if i not in picked]
    insert_at = destination - sum(1 for i in picked if i < destination)
    return kept[:insert_at] + moving + kept[insert_at:]


def move_tasks(
    day_tasks: list[Task],
    source: Collection[int],
    destination: int,
    completed_first: bool = False,
) -> list[Task] | None:
    """
    Drag-move tasks within their completion group.

    `source` and `destination` index the current visible order. Returns the
    renumbered visible order, or None when the move is rejected: empty or
    out-of-range source, or a source that spans both groups.
    """
    visible = visible_order(day_tasks, completed_first)
    indices = sorted(set(source))
    if not indices or indices[0] < 0 or indices[-1] >= len(visible):
        logger.debug(f"Rejected move: source {indices} outside 0..{len(visible) - 1}")
        return None

    moving_completed = visible[indices[0]].is_completed
    if any(visible[i].is_completed != moving_completed for i in indices):
        logger.debug("Rejected move: source spans both completion groups")
        return None

    group_indices = [i for i, t in enumerate(visible) if t.is_completed == moving_completed]
    lowest, highest = group_indices[0], group_indices[-1]
    dest = max(min(destination, highest + 1), lowest)

    group = [visible[i] for i in group_indices]
    relative_source = [group_indices.index(i) for i in indices]
    relative_dest = len(group) if dest > highest else group_indices.index(dest)
    group = move_items(group, relative_source, relative_dest)

    other = [t for t in visible if t.is_completed != moving_completed]
    if moving_completed == completed_first:
        final = group + other
    else:
        final = other + group
    return renumber(final)


def set_completed_first(day_tasks: list[Task], completed_first: bool) -> list[Task]:
    """Re-issue positions for a new group order; relative order is unchanged."""
    return normalize(day_tasks, completed_first)


def remove_task(
    task: Task,
    day_tasks: list[Task],
    completed_first: bool = False,
) -> list[Task]:
    """Drop a task from the day and renumber what remains."""
    remaining = [t for t in day_tasks if t.id != task.id]
    return normalize(remaining, completed_first)


def restore_task(
    snapshot: DeletedTask,
    day_tasks: list[Task],
    completed_first: bool = False,
) -> Task:
    """
    Recreate a deleted task as a brand-new record.

    The new task gets a fresh id and its former position, then the day is
    renumbered with it included. On a position tie it goes first.
    """
    task = Task(
        title=snapshot.title,
        created_at=snapshot.created_at,
        is_completed=snapshot.is_completed,
        position=snapshot.former_position,
        is_daily=snapshot.is_daily,
    )
    normalize([task, *day_tasks], completed_first)
    return task
