"""dailylist CLI - a personal list for today."""

import json
import logging
import shlex
import sys
import threading
from contextlib import contextmanager
from datetime import datetime, time
from typing import Iterator

import click

from .config import Config, load_config
from .core.tasks import DayGroup, Task
from .workflows import DailySession, close_session, open_session

logger = logging.getLogger(__name__)


@contextmanager
def session_scope(config: Config | None = None, timer=None) -> Iterator[DailySession]:
    """Open a session for one command and persist its state afterwards."""
    config = config or load_config()
    session = open_session(config, timer=timer)
    try:
        yield session
    finally:
        close_session(session, config)


def _parse_time(ctx, param, value: str | None) -> time | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        raise click.BadParameter(f"expected HH:MM, got '{value}'")


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _task_at(session: DailySession, number: int) -> Task:
    """Resolve a 1-based number in today's visible order."""
    visible = session.visible()
    if not 1 <= number <= len(visible):
        _fail(f"no task #{number} (today has {len(visible)})")
    return visible[number - 1]


def _task_json(t: Task) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "created_at": t.created_at.isoformat(),
        "completed": t.is_completed,
        "position": t.position,
        "daily": t.is_daily,
    }


def _format_task(number: int, t: Task) -> str:
    mark = "x" if t.is_completed else " "
    daily = " (daily)" if t.is_daily else ""
    return f"{number:>3}. [{mark}] {t.format_time()}  {t.title}{daily}"


def _show_tasks(tasks: list[Task], as_json: bool, empty_msg: str = "No tasks.") -> None:
    """Shared task display logic."""
    if as_json:
        click.echo(json.dumps([_task_json(t) for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for number, t in enumerate(tasks, start=1):
        click.echo(_format_task(number, t))


def _show_history(groups: list[DayGroup], as_json: bool) -> None:
    if as_json:
        click.echo(
            json.dumps(
                [
                    {"date": g.day.isoformat(), "tasks": [_task_json(t) for t in g.tasks]}
                    for g in groups
                ],
                indent=2,
            )
        )
        return

    if not groups:
        click.echo("No history yet.")
        return

    for index, group in enumerate(groups):
        if index:
            click.echo()
        click.echo(
            f"### {group.day.strftime('%a, %d %b %Y')} "
            f"({group.completed_count}/{len(group.tasks)} done)"
        )
        for t in group.tasks:
            mark = "x" if t.is_completed else " "
            click.echo(f"  [{mark}] {t.format_time()}  {t.title}")


def _show_today(session: DailySession) -> None:
    click.echo(f"{session.today.strftime('%a, %d %b')}")
    _show_tasks(session.visible(), False, "No tasks yet. Add some with 'dailylist add'.")


@click.group()
@click.version_option(package_name="dailylist")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """dailylist - tasks for today."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(as_json: bool):
    """Show today's tasks in order."""
    with session_scope() as session:
        if as_json:
            _show_tasks(session.visible(), True)
        else:
            _show_today(session)


@main.command()
@click.argument("text")
def add(text: str):
    """Add tasks separated by commas, semicolons or newlines."""
    with session_scope() as session:
        created = session.add_tasks(text)
        if not created:
            click.echo("Nothing to add.")
            return
        click.echo(f"Added {len(created)} task(s).")
        _show_today(session)


@main.command()
@click.argument("title")
@click.option("--daily", is_flag=True, help="Repeat this task every day")
@click.option("--at", "at", default=None, callback=_parse_time, help="Time of day (HH:MM)")
def quick(title: str, daily: bool, at: time | None):
    """Add a single task."""
    with session_scope() as session:
        task = session.quick_add(title, is_daily=daily, at=at)
        if task is None:
            click.echo("Nothing to add.")
            return
        click.echo(f"Added: {task.title}")


@main.command()
@click.argument("number", type=int)
def toggle(number: int):
    """Mark task NUMBER done (or not done)."""
    with session_scope() as session:
        task = session.toggle(_task_at(session, number).id)
        state = "done" if task.is_completed else "not done"
        click.echo(f"{task.title}: {state}")
        _show_today(session)


@main.command()
@click.argument("numbers", nargs=-1, type=int, required=True)
@click.option("--to", "target", type=int, required=True,
              help="Place before this task number (count + 1 for the end)")
def move(numbers: tuple[int, ...], target: int):
    """Move task(s) within their group."""
    with session_scope() as session:
        for number in numbers:
            _task_at(session, number)
        if session.move([n - 1 for n in numbers], target - 1):
            _show_today(session)
        else:
            click.echo("Nothing moved: tasks only move within their own group.")


@main.command()
@click.argument("number", type=int)
def delete(number: int):
    """Delete task NUMBER (undo is available briefly)."""
    with session_scope() as session:
        snapshot = session.delete(_task_at(session, number).id)
        click.echo(
            f"Deleted: {snapshot.title} "
            f"(run 'dailylist undo' within {session.undo.ttl:g}s to restore)"
        )


@main.command()
def undo():
    """Restore the most recently deleted task."""
    with session_scope() as session:
        task = session.restore()
        if task is None:
            click.echo("Nothing to undo.")
            return
        click.echo(f"Restored: {task.title}")
        _show_today(session)


@main.command()
@click.argument("number", type=int)
@click.option("--title", default=None, help="New title")
@click.option("--at", "at", default=None, callback=_parse_time, help="New time of day (HH:MM)")
@click.option("--daily/--no-daily", default=None, help="Turn recurrence on or off")
def edit(number: int, title: str | None, at: time | None, daily: bool | None):
    """Edit task NUMBER."""
    with session_scope() as session:
        task = session.edit(_task_at(session, number).id, title=title, time_of_day=at, is_daily=daily)
        click.echo(f"Updated: {task.title}")


@main.command()
@click.option("--completed-first/--incomplete-first", "completed_first", default=None,
              help="Which group to show first (flips when omitted)")
def order(completed_first: bool | None):
    """Choose whether completed tasks show first."""
    with session_scope() as session:
        if completed_first is None:
            session.flip_order()
        else:
            session.set_completed_first(completed_first)
        label = "Completed first" if session.completed_first else "Incomplete first"
        click.echo(label)
        _show_today(session)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--include-today", is_flag=True, help="Also show today")
def history(as_json: bool, include_today: bool):
    """Review past days."""
    with session_scope() as session:
        _show_history(session.history(include_today=include_today), as_json)


SHELL_HELP = """Commands:
  list | add TEXT | quick TITLE [daily] | toggle N | move N... to M
  delete N | undo | order | history | help | quit"""


def run_shell_command(session: DailySession, line: str) -> bool:
    """Run one shell line. Returns False when the shell should exit."""
    try:
        words = shlex.split(line)
    except ValueError as e:
        click.echo(f"Error: {e}")
        return True
    if not words:
        return True

    command, args = words[0].lower(), words[1:]
    visible = session.visible()

    def resolve(raw: str) -> Task | None:
        if raw.isdigit() and 1 <= int(raw) <= len(visible):
            return visible[int(raw) - 1]
        click.echo(f"No task #{raw}.")
        return None

    match command:
        case "quit" | "exit":
            return False
        case "help":
            click.echo(SHELL_HELP)
        case "list":
            _show_today(session)
        case "history":
            _show_history(session.history(), False)
        case "add":
            created = session.add_tasks(" ".join(args))
            click.echo(f"Added {len(created)} task(s).")
        case "quick":
            is_daily = bool(args) and args[-1].lower() == "daily"
            title = " ".join(args[:-1] if is_daily else args)
            task = session.quick_add(title, is_daily=is_daily)
            click.echo(f"Added: {task.title}" if task else "Nothing to add.")
        case "toggle" if args:
            if task := resolve(args[0]):
                session.toggle(task.id)
                _show_today(session)
        case "delete" if args:
            if task := resolve(args[0]):
                session.delete(task.id)
                click.echo(f"Deleted: {task.title} (undo within {session.undo.ttl:g}s)")
        case "undo":
            task = session.restore()
            click.echo(f"Restored: {task.title}" if task else "Nothing to undo.")
        case "order":
            session.flip_order()
            _show_today(session)
        case "move" if "to" in args:
            split = args.index("to")
            try:
                sources = [int(a) - 1 for a in args[:split]]
                target = int(args[split + 1]) - 1
            except (ValueError, IndexError):
                click.echo("Usage: move N... to M")
                return True
            if session.move(sources, target):
                _show_today(session)
            else:
                click.echo("Nothing moved.")
        case _:
            click.echo(SHELL_HELP)
    return True


@main.command()
def shell():
    """Interactive session with live undo expiry and midnight rollover."""
    from apscheduler.schedulers.background import BackgroundScheduler
    from apscheduler.triggers.cron import CronTrigger

    from .adapters.scheduler_timer import SchedulerTimer

    config = load_config()
    lock = threading.RLock()
    scheduler = BackgroundScheduler(timezone=config.timezone or None)
    timer = SchedulerTimer(scheduler, lock=lock)

    with session_scope(config, timer=timer) as session:

        def rollover() -> None:
            with lock:
                created = session.refresh_day()
            if created:
                logger.info(f"Rollover added {len(created)} daily task(s)")

        scheduler.add_job(rollover, CronTrigger(hour=0, minute=0), id="day_rollover")
        scheduler.start()
        logger.info("Scheduler started")

        _show_today(session)
        click.echo("Type 'help' for commands.")
        try:
            while True:
                line = click.prompt(">", default="", show_default=False)
                with lock:
                    session.refresh_day()
                    if not run_shell_command(session, line):
                        break
        except (KeyboardInterrupt, click.Abort):
            click.echo()
        finally:
            scheduler.shutdown(wait=False)


if __name__ == "__main__":
    main()
