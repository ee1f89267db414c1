from __future__ import annotations

from pathlib import Path

import allure
import pytest

from site_builder.tasks import (
    BoundedExecutor,
    CallbackCommand,
    EventBus,
    InvalidPluginError,
    Item,
    JsonCommandLedger,
    RunEvent,
    TaskDoneEvent,
    TaskRegistry,
    TaskRunner,
    attach_plugins,
)
from site_builder.tasks.events import parse_plugin

pytestmark = [
    allure.epic("Task Engine"),
    allure.feature("Completion Reporter"),
]


def _registry() -> TaskRegistry:
    return TaskRegistry(
        [Item(slug="a", extension="jpg", source_path=Path("a.jpg"), fingerprint="H1")],
        JsonCommandLedger(),
        media_lookup=lambda slug: {"slug": slug},
    )


def _record_all(bus: EventBus, log: list[str]) -> None:
    for event in RunEvent:
        bus.subscribe(event, lambda _payload, name=event.value: log.append(name))


def test_events_follow_lifecycle_order(tmp_path: Path) -> None:
    registry = _registry()
    registry.register(CallbackCommand(lambda done: done(), label="one"), "a", tmp_path / "1")
    registry.register(CallbackCommand(lambda done: done(), label="two"), "a", tmp_path / "2")
    bus = EventBus()
    log: list[str] = []
    _record_all(bus, log)

    runner = TaskRunner(
        registry=registry,
        executor=BoundedExecutor(concurrency=2),
        bus=bus,
        persist=lambda: log.append("persist"),
    )
    snapshot = runner.run()

    assert log == [
        "tasks_ready",
        "tasks_running",
        "task_done",
        "task_done",
        "all_tasks_done",
        "persist",
        "done",
    ]
    assert snapshot.number_of_tasks_needed == 2
    assert snapshot.number_of_tasks_run == 2


def test_zero_needed_tasks_still_emits_every_milestone() -> None:
    bus = EventBus()
    log: list[str] = []
    _record_all(bus, log)

    snapshot = TaskRunner(registry=_registry(), executor=BoundedExecutor(), bus=bus).run()

    assert log == ["tasks_ready", "tasks_running", "all_tasks_done", "done"]
    assert snapshot.number_of_tasks_run == 0


def test_task_done_payload_carries_command_and_item_metadata(tmp_path: Path) -> None:
    registry = _registry()
    registry.register(CallbackCommand(lambda done: done(), label="w100"), "a", tmp_path / "1")
    registry.register(CallbackCommand(lambda done: None, label="w200"), "a", tmp_path / "2")
    bus = EventBus()
    payloads: list[TaskDoneEvent] = []
    bus.subscribe(RunEvent.TASK_DONE, payloads.append)

    snapshot = TaskRunner(
        registry=registry,
        executor=BoundedExecutor(timeout_seconds=0.1),
        bus=bus,
    ).run()

    assert sorted(payload.cmd for payload in payloads) == ["w100", "w200"]
    assert all(payload.media == {"slug": "a"} for payload in payloads)
    assert snapshot.number_of_tasks_run == 1


def test_attach_plugins_skips_invalid_descriptors(caplog: pytest.LogCaptureFixture) -> None:
    bus = EventBus()
    calls: list[tuple[str, object]] = []

    attached = attach_plugins(
        bus,
        [
            {"hook": "ready", "task": lambda payload: calls.append(("ready", payload))},
            {"hook": "done", "task": lambda payload: calls.append(("done", payload))},
            {"hook": 5, "task": print},
            {"hook": "done", "task": "not callable"},
            {"hook": "someday", "task": print},
            "garbage",
        ],
        ready_payload="ready-data",
    )
    bus.emit(RunEvent.DONE, "done-data")

    assert [plugin.hook for plugin in attached] == [RunEvent.READY, RunEvent.DONE]
    assert calls == [("ready", "ready-data"), ("done", "done-data")]
    assert caplog.text.count("Invalid plugin") == 4


def test_parse_plugin_rejects_missing_task() -> None:
    with pytest.raises(InvalidPluginError, match="callable"):
        parse_plugin({"hook": "done"})
