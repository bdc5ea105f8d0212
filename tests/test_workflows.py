"""Tests for the session workflow layer."""

import logging
from datetime import date, datetime, time, timedelta
from unittest.mock import patch

import pytest

from dailylist.adapters.json_store import JsonTaskStore
from dailylist.adapters.memory_store import InMemoryTaskStore
from dailylist.config import Config
from dailylist.core.tasks import Task
from dailylist.core.undo import UndoBuffer
from dailylist.workflows import DailySession, close_session, open_session


class FakeClock:
    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 15, 9, 0))


@pytest.fixture
def store():
    return InMemoryTaskStore()


@pytest.fixture
def session(store, clock):
    s = DailySession(store=store, clock=clock, undo=UndoBuffer(ttl=5))
    s.refresh_day()
    return s


def titles(tasks):
    return [t.title for t in tasks]


def assert_normalized(session):
    assert [t.position for t in session.visible()] == [
        float(i) for i in range(1, len(session.day_tasks()) + 1)
    ]


class TestAddTasks:
    def test_bulk_add(self, session, store):
        created = session.add_tasks(" Workout , Read Book, ,Meditate ,,  Code  ")
        assert titles(created) == ["Workout", "Read Book", "Meditate", "Code"]
        assert titles(session.visible()) == ["Workout", "Read Book", "Meditate", "Code"]
        assert store.save_count == 1
        assert_normalized(session)

    def test_blank_input_persists_nothing(self, session, store):
        assert session.add_tasks(" , ;\n") == []
        assert store.query_all() == []
        assert store.save_count == 0

    def test_second_batch_appends(self, session, clock):
        session.add_tasks("A, B")
        clock.advance(minutes=5)
        session.add_tasks("C")
        assert titles(session.visible()) == ["A", "B", "C"]
        assert_normalized(session)


class TestQuickAdd:
    def test_single_task(self, session):
        task = session.quick_add("  Stretch ")
        assert task.title == "Stretch"
        assert titles(session.visible()) == ["Stretch"]

    def test_blank_title_ignored(self, session, store):
        assert session.quick_add("   ") is None
        assert store.query_all() == []

    def test_daily_with_time(self, session):
        task = session.quick_add("Workout", is_daily=True, at=time(6, 30))
        assert task.is_daily is True
        assert task.created_at == datetime(2025, 1, 15, 6, 30)


class TestToggleAndMove:
    def test_toggle_moves_batch_task_to_bottom_of_group(self, session):
        a, b, c = session.add_tasks("A, B, C")
        session.toggle(c.id)
        session.toggle(a.id)
        assert titles(session.visible()) == ["B", "C", "A"]
        assert_normalized(session)

    def test_toggle_settles_by_creation_time(self, session):
        a = session.quick_add("A", at=time(8, 0))
        session.quick_add("B", at=time(8, 5))
        c = session.quick_add("C", at=time(8, 10))
        session.toggle(c.id)
        session.toggle(a.id)
        assert titles(session.visible()) == ["B", "A", "C"]
        assert_normalized(session)

    def test_toggle_unknown_id(self, session):
        assert session.toggle("missing") is None

    def test_move(self, session):
        session.add_tasks("A, B, C")
        assert session.move([2], 0) is True
        assert titles(session.visible()) == ["C", "A", "B"]
        assert_normalized(session)

    def test_cross_group_move_rejected(self, session, store):
        a, b, c = session.add_tasks("A, B, C")
        session.toggle(c.id)
        saves = store.save_count
        before = [t.position for t in session.visible()]

        assert session.move([1, 2], 0) is False
        assert [t.position for t in session.visible()] == before
        assert store.save_count == saves

    def test_flip_order(self, session):
        a, b, c = session.add_tasks("A, B, C")
        session.toggle(b.id)
        session.flip_order()
        assert session.completed_first is True
        assert titles(session.visible()) == ["B", "A", "C"]
        assert_normalized(session)


class TestDeleteAndRestore:
    def test_restore_within_window(self, session, clock):
        a, b, c = session.add_tasks("A, B, C")
        session.toggle(b.id)
        session.delete(b.id)
        assert titles(session.visible()) == ["A", "C"]

        clock.advance(seconds=3)
        restored = session.restore()
        assert restored.id != b.id
        assert restored.title == "B"
        assert restored.created_at == b.created_at
        assert restored.is_completed is True
        assert titles(session.visible()) == ["A", "C", "B"]
        assert_normalized(session)

    def test_restore_after_expiry(self, session, clock):
        (a,) = session.add_tasks("A")
        session.delete(a.id)
        clock.advance(seconds=5)
        assert session.restore() is None
        assert session.visible() == []

    def test_only_latest_delete_is_undoable(self, session):
        a, b = session.add_tasks("A, B")
        session.delete(a.id)
        session.delete(b.id)
        assert session.restore().title == "B"
        assert session.restore() is None

    def test_restore_into_original_day_after_rollover(self, session, clock):
        clock.current = datetime(2025, 1, 15, 23, 59, 58)
        (a,) = session.add_tasks("Late")
        session.delete(a.id)
        clock.advance(seconds=3)
        session.refresh_day()

        restored = session.restore()
        assert restored.day == date(2025, 1, 15)
        assert session.visible() == []
        assert titles(session.day_tasks(date(2025, 1, 15))) == ["Late"]


class TestEdit:
    def test_edit_fields(self, session):
        (a,) = session.add_tasks("Read")
        task = session.edit(a.id, title="Read book", time_of_day=time(20, 0), is_daily=True)
        assert task.title == "Read book"
        assert task.created_at == datetime(2025, 1, 15, 20, 0)
        assert task.is_daily is True
        assert task.position == 1.0

    def test_daily_off_propagates(self, store, clock):
        for day in (13, 14):
            store.insert(Task(title="Workout", created_at=datetime(2025, 1, day, 7, 0), is_daily=True))
        session = DailySession(store=store, clock=clock)
        session.refresh_day()
        workouts = [t for t in store.query_all() if t.title == "Workout"]
        assert len(workouts) == 3

        session.edit(workouts[0].id, is_daily=False)
        assert not any(t.is_daily for t in store.query_all() if t.title == "Workout")

        clock.advance(days=1)
        assert session.refresh_day() == []

    def test_unknown_id(self, session):
        assert session.edit("missing", title="x") is None


class TestDayRollover:
    @pytest.fixture
    def seeded(self, store):
        store.insert(Task(title="Workout", created_at=datetime(2025, 1, 14, 7, 0), is_daily=True))
        store.insert(Task(title="One-off", created_at=datetime(2025, 1, 14, 8, 0)))
        return store

    def test_first_refresh_creates_daily_tasks(self, seeded, clock):
        session = DailySession(store=seeded, clock=clock)
        created = session.refresh_day()
        assert titles(created) == ["Workout"]
        assert created[0].created_at == datetime(2025, 1, 15, 7, 0)
        assert titles(session.visible()) == ["Workout"]

    def test_same_day_refresh_is_noop(self, seeded, clock):
        session = DailySession(store=seeded, clock=clock)
        session.refresh_day()
        clock.advance(hours=3)
        assert session.refresh_day() == []
        assert session.ensure_daily_tasks() == []

    def test_midnight_rollover(self, seeded, clock):
        session = DailySession(store=seeded, clock=clock)
        session.refresh_day()
        clock.current = datetime(2025, 1, 16, 0, 0, 5)
        created = session.refresh_day()
        assert titles(created) == ["Workout"]
        assert session.today == date(2025, 1, 16)

    def test_deleted_daily_task_not_recreated_while_undoable(self, seeded, clock):
        undo = UndoBuffer(ttl=5)
        session = DailySession(store=seeded, clock=clock, undo=undo)
        (workout,) = session.refresh_day()
        session.delete(workout.id)

        clock.advance(seconds=2)
        session = DailySession(store=seeded, clock=clock, undo=undo)
        assert session.refresh_day() == []
        restored = session.restore()
        assert titles(session.visible()) == ["Workout"]
        assert restored.is_daily is True

    def test_deleted_daily_task_returns_after_undo_window(self, seeded, clock):
        undo = UndoBuffer(ttl=5)
        session = DailySession(store=seeded, clock=clock, undo=undo)
        (workout,) = session.refresh_day()
        session.delete(workout.id)

        clock.advance(seconds=10)
        session = DailySession(store=seeded, clock=clock, undo=undo)
        assert titles(session.refresh_day()) == ["Workout"]
        assert session.restore() is None

    def test_history_excludes_today(self, seeded, clock):
        session = DailySession(store=seeded, clock=clock)
        session.refresh_day()
        groups = session.history()
        assert [g.day for g in groups] == [date(2025, 1, 14)]
        assert len(session.history(include_today=True)) == 2


class TestSaveFailure:
    def test_failure_is_logged_not_raised(self, clock, caplog):
        store = InMemoryTaskStore(fail_saves=True)
        session = DailySession(store=store, clock=clock)
        with caplog.at_level(logging.ERROR, logger="dailylist.workflows"):
            created = session.add_tasks("A, B")
        assert titles(created) == ["A", "B"]
        assert titles(session.visible()) == ["A", "B"]
        assert "Create save error" in caplog.text


class TestOpenCloseSession:
    @pytest.fixture
    def config(self, tmp_path):
        return Config(
            data_file=str(tmp_path / "tasks.json"),
            state_file=str(tmp_path / "state.json"),
            undo_seconds=5,
        )

    def test_state_carries_between_runs(self, config):
        start = datetime(2025, 1, 15, 9, 0)
        with patch("dailylist.workflows.SystemClock") as mock_clock:
            mock_clock.return_value = FakeClock(start)
            session = open_session(config)
            (a,) = session.add_tasks("Read")
            session.flip_order()
            session.delete(a.id)
            close_session(session, config)

            mock_clock.return_value = FakeClock(start + timedelta(seconds=2))
            session = open_session(config)
            assert session.completed_first is True
            assert session.restore().title == "Read"
            close_session(session, config)

            session = open_session(config)
            assert titles(session.visible()) == ["Read"]

    def test_expired_undo_not_carried(self, config):
        start = datetime(2025, 1, 15, 9, 0)
        with patch("dailylist.workflows.SystemClock") as mock_clock:
            mock_clock.return_value = FakeClock(start)
            session = open_session(config)
            (a,) = session.add_tasks("Read")
            session.delete(a.id)
            close_session(session, config)

            mock_clock.return_value = FakeClock(start + timedelta(seconds=10))
            session = open_session(config)
            assert session.restore() is None

    def test_undo_of_daily_task_leaves_one_instance(self, config):
        seed = JsonTaskStore(config.data_path)
        seed.insert(Task(title="Workout", created_at=datetime(2025, 1, 14, 7, 0), is_daily=True))
        seed.save()

        start = datetime(2025, 1, 15, 9, 0)
        with patch("dailylist.workflows.SystemClock") as mock_clock:
            mock_clock.return_value = FakeClock(start)
            session = open_session(config)
            (workout,) = session.visible()
            session.delete(workout.id)
            close_session(session, config)

            mock_clock.return_value = FakeClock(start + timedelta(seconds=2))
            session = open_session(config)
            assert session.restore().title == "Workout"
            close_session(session, config)

        today = [
            t for t in JsonTaskStore(config.data_path).query_all()
            if t.created_at.date() == date(2025, 1, 15)
        ]
        assert titles(today) == ["Workout"]
        assert today[0].is_daily is True
