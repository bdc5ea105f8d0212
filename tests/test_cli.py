"""Tests for the CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dailylist.cli import main, run_shell_command
from dailylist.adapters.memory_store import InMemoryTaskStore
from dailylist.config import Config
from dailylist.workflows import DailySession


@pytest.fixture
def config(tmp_path):
    return Config(
        data_file=str(tmp_path / "tasks.json"),
        state_file=str(tmp_path / "state.json"),
    )


@pytest.fixture
def run(config):
    runner = CliRunner()

    def _run(*args):
        with patch("dailylist.cli.load_config", return_value=config):
            return runner.invoke(main, list(args))

    return _run


def listed_titles(run):
    result = run("list", "--json")
    return [t["title"] for t in json.loads(result.output)]


class TestCommands:
    def test_add_and_list(self, run):
        result = run("add", "Workout, Read; Meditate")
        assert result.exit_code == 0
        assert "Added 3 task(s)." in result.output
        assert listed_titles(run) == ["Workout", "Read", "Meditate"]

    def test_add_nothing(self, run):
        result = run("add", " , ; ")
        assert result.exit_code == 0
        assert "Nothing to add." in result.output

    def test_empty_list(self, run):
        result = run("list")
        assert "No tasks yet" in result.output

    def test_toggle_and_order(self, run):
        run("add", "A, B, C")
        assert run("toggle", "1").exit_code == 0
        assert listed_titles(run) == ["B", "C", "A"]

        result = run("order", "--completed-first")
        assert "Completed first" in result.output
        assert listed_titles(run) == ["A", "B", "C"]

    def test_move(self, run):
        run("add", "A, B, C")
        assert run("move", "3", "--to", "1").exit_code == 0
        assert listed_titles(run) == ["C", "A", "B"]

    def test_move_across_groups_is_rejected(self, run):
        run("add", "A, B, C")
        run("toggle", "3")
        result = run("move", "2", "3", "--to", "1")
        assert result.exit_code == 0
        assert "Nothing moved" in result.output
        assert listed_titles(run) == ["A", "B", "C"]

    def test_delete_and_undo(self, run):
        run("add", "A, B")
        result = run("delete", "1")
        assert "Deleted: A" in result.output
        assert listed_titles(run) == ["B"]

        result = run("undo")
        assert "Restored: A" in result.output
        assert listed_titles(run) == ["A", "B"]
        assert "Nothing to undo." in run("undo").output

    def test_bad_index(self, run):
        result = run("toggle", "4")
        assert result.exit_code == 1
        assert "no task #4" in result.output

    def test_quick_daily_and_edit(self, run):
        assert run("quick", "Stretch", "--daily", "--at", "06:30").exit_code == 0
        data = json.loads(run("list", "--json").output)
        assert data[0]["daily"] is True
        assert data[0]["created_at"].endswith("06:30:00")

        run("edit", "1", "--title", "Long stretch", "--no-daily")
        data = json.loads(run("list", "--json").output)
        assert data[0]["title"] == "Long stretch"
        assert data[0]["daily"] is False

    def test_bad_time(self, run):
        result = run("quick", "Stretch", "--at", "late")
        assert result.exit_code == 2
        assert "expected HH:MM" in result.output

    def test_history_empty(self, run):
        run("add", "Today only")
        assert "No history yet." in run("history").output
        data = json.loads(run("history", "--json", "--include-today").output)
        assert data[0]["tasks"][0]["title"] == "Today only"


class TestShell:
    def test_starts_and_quits(self, config):
        runner = CliRunner()
        with patch("dailylist.cli.load_config", return_value=config):
            result = runner.invoke(main, ["shell"], input="add A, B\nquit\n")
        assert result.exit_code == 0, result.output
        assert "Type 'help' for commands." in result.output
        assert json.loads(config.data_path.read_text())["tasks"][0]["title"] == "A"

    def test_end_of_input_exits_cleanly(self, config):
        runner = CliRunner()
        with patch("dailylist.cli.load_config", return_value=config):
            result = runner.invoke(main, ["shell"], input="")
        assert result.exit_code == 0, result.output


class TestShellCommands:
    @pytest.fixture
    def session(self):
        from datetime import datetime

        class Clock:
            def now(self):
                return datetime(2025, 1, 15, 9, 0)

        s = DailySession(store=InMemoryTaskStore(), clock=Clock())
        s.refresh_day()
        return s

    def test_quit(self, session):
        assert run_shell_command(session, "quit") is False

    def test_add_toggle_move(self, session):
        run_shell_command(session, "add A, B, C")
        run_shell_command(session, "toggle 1")
        assert [t.title for t in session.visible()] == ["B", "C", "A"]
        run_shell_command(session, "move 2 to 1")
        assert [t.title for t in session.visible()] == ["C", "B", "A"]

    def test_quick_daily(self, session):
        run_shell_command(session, "quick Read book daily")
        (task,) = session.visible()
        assert task.title == "Read book"
        assert task.is_daily is True

    def test_delete_undo(self, session):
        run_shell_command(session, "add A")
        run_shell_command(session, "delete 1")
        assert session.visible() == []
        run_shell_command(session, "undo")
        assert [t.title for t in session.visible()] == ["A"]

    def test_unknown_command_keeps_running(self, session):
        assert run_shell_command(session, "frobnicate") is True
        assert run_shell_command(session, 'add "unclosed') is True
