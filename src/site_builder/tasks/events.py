"""Lifecycle event bus and plugin hooks."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from site_builder.tasks.models import RunEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class InvalidPluginError(ValueError):
    """Plugin descriptor is missing a string hook or a callable task."""


@dataclass(slots=True)
class Plugin:
    """Callable attached to one lifecycle hook."""

    hook: RunEvent
    task: EventHandler


def parse_plugin(raw: object) -> Plugin:
    """Validate a plugin descriptor given as a ``Plugin`` or ``{hook, task}`` mapping."""

    if isinstance(raw, Plugin):
        hook: object = raw.hook
        task: object = raw.task
    elif isinstance(raw, Mapping):
        hook = raw.get("hook")
        task = raw.get("task")
    else:
        raise InvalidPluginError(f"Plugin must be a mapping with hook and task: {raw!r}")

    if not isinstance(hook, str) or not hook:
        raise InvalidPluginError(f"Plugin hook must be a non-empty string: {hook!r}")
    if not callable(task):
        raise InvalidPluginError(f"Plugin task must be callable: {task!r}")
    try:
        event = RunEvent(hook)
    except ValueError as error:
        raise InvalidPluginError(f"Unknown plugin hook: {hook!r}") from error
    return Plugin(hook=event, task=task)


class EventBus:
    """Synchronous publish/subscribe keyed by ``RunEvent``."""

    def __init__(self) -> None:
        self._handlers: dict[RunEvent, list[EventHandler]] = defaultdict(list)
        self.emitted: list[RunEvent] = []

    def subscribe(self, event: RunEvent, handler: EventHandler) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: RunEvent, payload: Any = None) -> None:
        self.emitted.append(event)
        for handler in list(self._handlers[event]):
            handler(payload)


def attach_plugins(
    bus: EventBus,
    plugins: Iterable[object],
    *,
    ready_payload: Any = None,
) -> list[Plugin]:
    """Subscribe valid plugins to their hooks; ``ready`` plugins run immediately.

    Invalid descriptors are logged and skipped.
    """

    attached: list[Plugin] = []
    for raw in plugins:
        try:
            plugin = parse_plugin(raw)
        except InvalidPluginError as error:
            logger.warning("Invalid plugin: %s", error)
            continue
        if plugin.hook is RunEvent.READY:
            plugin.task(ready_payload)
        else:
            bus.subscribe(plugin.hook, plugin.task)
        attached.append(plugin)
    return attached
