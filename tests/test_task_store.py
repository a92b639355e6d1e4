# tests/test_task_store.py

from __future__ import annotations

import asyncio

import pytest

from sales_tracker.tasks.task_models import NEUTRAL_METRICS, PerformanceGrade, Priority, TaskInput, TaskStatus
from sales_tracker.tasks.task_source import TaskSourceError
from sales_tracker.tasks.task_store import StoreState, TaskStore

from .fakes import START, FakeClock, FakeTaskSource, SequentialIds, make_task


def _titles(store: TaskStore) -> list[str]:
    return [t.title for t in store.tasks]


# ---- add ----


def test_add_assigns_id_and_timestamps(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.add(TaskInput(title="B", revenue=50, time_taken=5, status="Todo"))

    t = store.get(task_id)
    assert t is not None
    assert task_id == "task-1"
    assert t.created_at == clock.now()
    assert t.completed_at is None
    assert t.time_taken == 5.0
    assert t.priority is Priority.MEDIUM


def test_add_done_sets_completed_at_to_creation_time(store: TaskStore) -> None:
    task_id = store.add(TaskInput(title="Closed deal", revenue=500, time_taken=0, status=TaskStatus.DONE))

    t = store.get(task_id)
    assert t is not None
    assert t.completed_at == t.created_at
    assert t.time_taken == 1.0


def test_add_keeps_given_id_unless_taken(store: TaskStore) -> None:
    assert store.add(TaskInput(title="one", id="custom")) == "custom"
    second = store.add(TaskInput(title="two", id="custom"))

    assert second != "custom"
    assert len({t.id for t in store.tasks}) == 2


def test_add_does_not_reuse_id_pending_undo(store: TaskStore) -> None:
    store.add(TaskInput(title="one", id="x"))
    store.delete("x")

    new_id = store.add(TaskInput(title="two", id="x"))
    store.undo_delete()

    assert new_id != "x"
    assert sorted(t.id for t in store.tasks) == sorted([new_id, "x"])


# ---- update ----


def test_update_unknown_id_is_a_noop(store: TaskStore) -> None:
    store.add(TaskInput(title="keep"))
    before = store.tasks

    store.update("missing", {"title": "nope", "status": "Done"})

    assert store.tasks == before


def test_done_transition_stamps_completed_at_once(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.add(TaskInput(title="A", status="Todo"))

    call_time = clock.advance(hours=2)
    store.update(task_id, {"status": "Done"})
    t = store.get(task_id)
    assert t is not None
    assert t.completed_at is not None
    assert t.completed_at >= call_time

    stamped = t.completed_at
    clock.advance(hours=1)
    store.update(task_id, {"status": "In Progress"})
    t = store.get(task_id)
    assert t is not None
    assert t.status is TaskStatus.IN_PROGRESS
    assert t.completed_at == stamped


def test_done_transition_overrides_patched_completed_at(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.add(TaskInput(title="A"))
    clock.advance(minutes=5)

    store.update(task_id, {"status": "Done", "completedAt": "2001-01-01T00:00:00Z"})

    t = store.get(task_id)
    assert t is not None
    assert t.completed_at == clock.now()


def test_update_done_to_done_keeps_completed_at(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.add(TaskInput(title="A", status="Done"))
    created = store.get(task_id).completed_at  # type: ignore[union-attr]

    clock.advance(days=1)
    store.update(task_id, {"status": "Done", "revenue": 10})

    t = store.get(task_id)
    assert t is not None
    assert t.completed_at == created
    assert t.revenue == 10.0


def test_update_coerces_fields_and_ignores_immutable_ones(store: TaskStore) -> None:
    task_id = store.add(TaskInput(title="A", revenue=10, time_taken=3))
    created_at = store.get(task_id).created_at  # type: ignore[union-attr]

    store.update(
        task_id,
        {
            "timeTaken": 0,
            "revenue": "not a number",
            "priority": "high",
            "title": " ",
            "notes": "ping Monday",
            "id": "hijack",
            "createdAt": "1999-01-01T00:00:00Z",
            "color": "blue",
        },
    )

    t = store.get(task_id)
    assert t is not None
    assert t.id == task_id
    assert t.created_at == created_at
    assert t.time_taken == 1.0
    assert t.revenue == 0.0
    assert t.priority is Priority.HIGH
    assert t.title == "Untitled Task"
    assert t.notes == "ping Monday"


# ---- delete / undo ----


def test_single_slot_undo_restores_only_last_delete(store: TaskStore) -> None:
    a = store.add(TaskInput(title="A"))
    b = store.add(TaskInput(title="B"))
    store.add(TaskInput(title="C"))

    store.delete(a)
    store.delete(b)
    store.undo_delete()

    assert _titles(store) == ["C", "B"]
    assert store.last_deleted is None

    store.undo_delete()
    assert _titles(store) == ["C", "B"]


def test_undo_appends_at_end(store: TaskStore) -> None:
    a = store.add(TaskInput(title="A"))
    store.add(TaskInput(title="B"))

    store.delete(a)
    store.undo_delete()

    assert _titles(store) == ["B", "A"]


def test_delete_unknown_id_overwrites_slot_with_nothing(store: TaskStore) -> None:
    a = store.add(TaskInput(title="A"))
    store.delete(a)
    assert store.last_deleted is not None

    store.delete("missing")

    assert store.last_deleted is None
    store.undo_delete()
    assert store.tasks == ()


def test_deleted_record_is_a_copy(store: TaskStore) -> None:
    a = store.add(TaskInput(title="A"))
    store.delete(a)

    snapshot = store.last_deleted
    assert snapshot is not None
    snapshot.title = "mutated outside"

    store.undo_delete()
    assert _titles(store) == ["A"]


def test_clear_last_deleted_discards_undo(store: TaskStore) -> None:
    a = store.add(TaskInput(title="A"))
    store.delete(a)

    store.clear_last_deleted()
    store.undo_delete()

    assert store.last_deleted is None
    assert store.tasks == ()


def test_add_update_delete_undo_scenario(store: TaskStore) -> None:
    task_id = store.add(TaskInput(title="B", revenue=50, time_taken=5, status="Todo"))
    store.update(task_id, {"status": "Done"})
    store.delete(task_id)
    store.undo_delete()

    (t,) = store.tasks
    assert t.title == "B"
    assert t.status is TaskStatus.DONE
    assert t.completed_at is not None


# ---- derived views ----


def test_derived_views_follow_mutations(store: TaskStore) -> None:
    store.load([make_task(id="a", revenue=100.0, time_taken=1.0)])
    assert store.metrics.total_revenue == 100.0

    store.add(TaskInput(title="big", revenue=900, time_taken=1))
    assert store.metrics.total_revenue == 1000.0
    assert store.ranked_derived_tasks[0].title == "big"

    store.update("a", {"revenue": 5000})
    assert [d.id for d in store.ranked_derived_tasks] == ["a", "task-1"]

    store.delete("a")
    assert store.metrics.total_revenue == 900.0


def test_derived_views_are_cached_until_change(store: TaskStore) -> None:
    store.load([make_task(id="a")])

    first = store.metrics
    assert store.metrics is first

    store.update("a", {"notes": "x"})
    assert store.metrics is not first


def test_returned_tasks_are_snapshots(store: TaskStore) -> None:
    store.load([make_task(id="a")])

    store.tasks[0].title = "changed"
    store.ranked_derived_tasks[0].task.revenue = 1e9

    t = store.get("a")
    assert t is not None
    assert t.title == "Call Acme"
    assert store.metrics.total_revenue == 100.0


def test_empty_store_reports_neutral_metrics(store: TaskStore) -> None:
    store.load([])
    assert store.metrics == NEUTRAL_METRICS
    assert store.ranked_derived_tasks == []


def test_views_are_neutral_while_uninitialized(store: TaskStore) -> None:
    store.add(TaskInput(title="early", revenue=100))

    assert store.loading is True
    assert store.metrics == NEUTRAL_METRICS
    assert store.ranked_derived_tasks == []


# ---- initialize ----


@pytest.mark.asyncio
async def test_initialize_loads_normalized_tasks(store: TaskStore) -> None:
    source = FakeTaskSource([{"title": "A", "revenue": 100, "timeTaken": 0, "status": "Done"}])

    assert await store.initialize(source) is True

    assert store.state is StoreState.READY
    assert store.loading is False
    assert store.error is None
    (t,) = store.tasks
    assert t.time_taken == 1.0
    assert t.completed_at == START


@pytest.mark.asyncio
async def test_initialize_runs_once(store: TaskStore) -> None:
    source = FakeTaskSource([{"title": "A"}])

    results = await asyncio.gather(store.initialize(source), store.initialize(source))

    assert sorted(results) == [False, True]
    assert source.calls == 1
    assert await store.initialize(source) is False
    assert len(store) == 1


@pytest.mark.asyncio
async def test_views_are_neutral_while_loading() -> None:
    gate = asyncio.Event()

    class SlowSource(FakeTaskSource):
        async def fetch_raw(self):
            await gate.wait()
            return await super().fetch_raw()

    store = TaskStore(clock=FakeClock(), ids=SequentialIds())
    pending = asyncio.create_task(store.initialize(SlowSource([{"title": "A", "revenue": 500}])))
    await asyncio.sleep(0)

    assert store.state is StoreState.LOADING
    assert store.loading is True
    assert store.metrics == NEUTRAL_METRICS

    gate.set()
    await pending

    assert store.state is StoreState.READY
    assert store.metrics.total_revenue == 500.0


@pytest.mark.asyncio
async def test_initialize_seeds_when_payload_is_empty(store: TaskStore) -> None:
    seeded = [make_task(id="s1"), make_task(id="s2")]
    calls: list[int] = []

    def seed(n: int):
        calls.append(n)
        return seeded

    await store.initialize(FakeTaskSource([]), seed=seed, seed_count=2)

    assert calls == [2]
    assert [t.id for t in store.tasks] == ["s1", "s2"]
    assert store.state is StoreState.READY


@pytest.mark.asyncio
async def test_initialize_failure_is_recorded(store: TaskStore) -> None:
    source = FakeTaskSource(error=TaskSourceError("Failed to load tasks.json (404)"))

    assert await store.initialize(source, seed=lambda n: [make_task()]) is True

    assert store.state is StoreState.FAILED
    assert store.loading is False
    assert store.error == "Failed to load tasks.json (404)"
    assert store.tasks == ()
    assert store.metrics == NEUTRAL_METRICS


@pytest.mark.asyncio
async def test_initialize_failure_can_fall_back_to_seed(store: TaskStore) -> None:
    source = FakeTaskSource(error=TaskSourceError("boom"))

    await store.initialize(source, seed=lambda n: [make_task(id="s")], seed_on_failure=True)

    assert store.state is StoreState.FAILED
    assert store.error == "boom"
    assert [t.id for t in store.tasks] == ["s"]


@pytest.mark.asyncio
async def test_initialize_records_os_errors_from_custom_sources(store: TaskStore) -> None:
    source = FakeTaskSource(error=PermissionError("tasks.json: permission denied"))

    await store.initialize(source)

    assert store.state is StoreState.FAILED
    assert store.error == "tasks.json: permission denied"


@pytest.mark.asyncio
async def test_extreme_records_do_not_fail_the_load(store: TaskStore) -> None:
    source = FakeTaskSource(
        [
            {"id": "ok", "title": "ok"},
            {"id": "eot", "title": "end of time", "status": "Done", "createdAt": "9999-12-31T12:00:00Z"},
            {"id": "bot", "title": "offset before time", "createdAt": "0001-01-01T00:00:00+05:00"},
            {"id": "big1", "title": "big", "revenue": 1e308},
            {"id": "big2", "title": "bigger", "revenue": 1e308},
            {"id": "up", "title": "up", "revenue": 1e10, "timeTaken": 1e-300},
            {"id": "down", "title": "down", "revenue": -1e10, "timeTaken": 1e-300},
        ]
    )

    await store.initialize(source)

    assert store.state is StoreState.READY
    assert store.error is None
    assert len(store) == 7

    ranked = store.ranked_derived_tasks
    assert ranked[0].id == "up"
    assert ranked[-1].id == "down"
    m = store.metrics
    assert 0.0 <= m.time_efficiency_pct <= 100.0
    assert m.performance_grade in list(PerformanceGrade)


def test_update_with_out_of_range_completed_at_clears_it(store: TaskStore) -> None:
    store.load([make_task(completed_at=START)])

    store.update("t1", {"completedAt": "0001-01-01T00:00:00+05:00"})

    assert store.get("t1").completed_at is None
