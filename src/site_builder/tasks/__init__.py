"""Task memoization and bounded execution for external build commands."""

from site_builder.tasks.events import EventBus, InvalidPluginError, Plugin, attach_plugins
from site_builder.tasks.executor import BoundedExecutor
from site_builder.tasks.fingerprint import file_fingerprint
from site_builder.tasks.ledger import CommandLedger, JsonCommandLedger
from site_builder.tasks.models import (
    CallbackCommand,
    Item,
    ProcessCommand,
    RunEvent,
    Task,
    TaskDoneEvent,
    TaskOutcome,
    TaskResult,
    TasksSnapshot,
    command_signature,
)
from site_builder.tasks.registry import TaskRegistry, UnknownItemError
from site_builder.tasks.runner import TaskRunner

__all__ = [
    "BoundedExecutor",
    "CallbackCommand",
    "CommandLedger",
    "EventBus",
    "InvalidPluginError",
    "Item",
    "JsonCommandLedger",
    "Plugin",
    "ProcessCommand",
    "RunEvent",
    "Task",
    "TaskDoneEvent",
    "TaskOutcome",
    "TaskRegistry",
    "TaskResult",
    "TaskRunner",
    "TasksSnapshot",
    "UnknownItemError",
    "attach_plugins",
    "command_signature",
    "file_fingerprint",
]
