"""Run orchestration that sequences registry, executor and lifecycle events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from site_builder.tasks.events import EventBus
from site_builder.tasks.executor import BoundedExecutor
from site_builder.tasks.models import RunEvent, TaskDoneEvent, TaskResult, TasksSnapshot
from site_builder.tasks.registry import TaskRegistry

logger = logging.getLogger(__name__)


class TaskRunner:
    """Executes the needed tasks of one registry and reports each milestone.

    Event order is always ``tasks_ready``, ``tasks_running``, ``task_done``
    (once per settled task), ``all_tasks_done``, ``done``. ``persist`` runs
    between ``all_tasks_done`` and ``done``.
    """

    def __init__(
        self,
        *,
        registry: TaskRegistry,
        executor: BoundedExecutor,
        bus: EventBus,
        persist: Callable[[], None] | None = None,
        media: Callable[[], list[dict[str, Any]]] | None = None,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._bus = bus
        self._persist = persist
        self._media = media
        self.tasks_run = 0
        self.results: list[TaskResult] = []

    def run(self) -> TasksSnapshot:
        return asyncio.run(self.run_async())

    async def run_async(self) -> TasksSnapshot:
        self._bus.emit(RunEvent.TASKS_READY, self.snapshot())

        needed = list(self._registry.needed)
        if needed:
            self.results = await self._executor.run(
                needed,
                on_task_done=self._task_done,
                on_queued=lambda: self._bus.emit(RunEvent.TASKS_RUNNING, self.snapshot()),
            )
        else:
            self._bus.emit(RunEvent.TASKS_RUNNING, self.snapshot())

        self._bus.emit(RunEvent.ALL_TASKS_DONE, self.snapshot())
        if self._persist is not None:
            self._persist()

        final = self.snapshot()
        logger.info(
            "Tasks requested=%d needed=%d run=%d",
            final.number_of_tasks_requested,
            final.number_of_tasks_needed,
            final.number_of_tasks_run,
        )
        self._bus.emit(RunEvent.DONE, final)
        return final

    def snapshot(self) -> TasksSnapshot:
        return self._registry.snapshot(
            tasks_run=self.tasks_run,
            media=self._media() if self._media is not None else None,
        )

    def _task_done(self, result: TaskResult) -> None:
        if result.succeeded:
            self.tasks_run += 1
        self._bus.emit(
            RunEvent.TASK_DONE,
            TaskDoneEvent(cmd=result.task.name, media=result.task.media, result=result),
        )
