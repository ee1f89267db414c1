"""Domain models for task registration and execution."""

from __future__ import annotations

import hashlib
import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class RunEvent(str, Enum):
    """Lifecycle milestones emitted during one run, in emission order."""

    READY = "ready"
    TASKS_READY = "tasks_ready"
    TASKS_RUNNING = "tasks_running"
    TASK_DONE = "task_done"
    RENDITION_DONE = "rendition_done"
    ALL_TASKS_DONE = "all_tasks_done"
    DONE = "done"


class TaskOutcome(str, Enum):
    """How a single task settled."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass(slots=True)
class Item:
    """One discovered source file."""

    slug: str
    extension: str
    source_path: Path
    fingerprint: str


@dataclass(frozen=True, slots=True)
class ProcessCommand:
    """Shell command line executed as an external process."""

    text: str

    @property
    def name(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class CallbackCommand:
    """In-process callable invoked with a ``done`` continuation."""

    func: Callable[[Callable[[], None]], Any]
    label: str | None = None

    @property
    def name(self) -> str:
        return self.label or getattr(self.func, "__qualname__", repr(self.func))


Command = ProcessCommand | CallbackCommand


def command_signature(command: Command) -> str:
    """Stable ledger key for a command.

    Process commands use their literal text. Callbacks use their name plus a
    SHA-256 of their source, so the same callback maps to the same key across runs.
    """

    if isinstance(command, ProcessCommand):
        return command.text
    try:
        serialized = inspect.getsource(command.func)
    except (OSError, TypeError):
        code = getattr(command.func, "__code__", None)
        serialized = repr(code.co_code) if code is not None else repr(command.func)
    digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()
    return f"{command.name}{digest}"


@dataclass(slots=True)
class Task:
    """Pending unit of work admitted by the registry."""

    command: Command
    item_id: str
    output_path: Path
    signature: str
    media: dict[str, Any] | None = None
    on_complete: Callable[[str], None] | None = None
    on_timeout: Callable[[], None] | None = None

    @property
    def name(self) -> str:
        return self.command.name


@dataclass(slots=True)
class TaskResult:
    """Typed outcome of one executed task."""

    task: Task
    outcome: TaskOutcome
    exit_code: int | None = None
    stdout: str = ""
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is TaskOutcome.SUCCEEDED


@dataclass(slots=True)
class TaskDoneEvent:
    """Payload of one ``task_done`` event."""

    cmd: str
    media: dict[str, Any] | None
    result: TaskResult


@dataclass(slots=True)
class TasksSnapshot:
    """Aggregate counters carried by lifecycle events."""

    number_of_tasks_requested: int
    number_of_tasks_needed: int
    number_of_tasks_run: int
    needed_tasks: list[Task] = field(default_factory=list)
    tasks_requested: list[str] = field(default_factory=list)
    media: list[dict[str, Any]] = field(default_factory=list)
