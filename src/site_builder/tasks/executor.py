"""Bounded-concurrency executor for process and callback tasks."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import signal
from collections.abc import Callable, Sequence

from site_builder.tasks.models import (
    CallbackCommand,
    ProcessCommand,
    Task,
    TaskOutcome,
    TaskResult,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 600
_TERMINATE_GRACE_SECONDS = 2.0


class BoundedExecutor:
    """Run tasks in FIFO order with at most ``concurrency`` outstanding at once."""

    def __init__(
        self,
        *,
        concurrency: int = 1,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        kill_on_timeout: bool = True,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1.")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0.")
        self.concurrency = concurrency
        self.timeout_seconds = timeout_seconds
        self.kill_on_timeout = kill_on_timeout

    async def run(
        self,
        tasks: Sequence[Task],
        *,
        on_task_done: Callable[[TaskResult], None] | None = None,
        on_queued: Callable[[], None] | None = None,
    ) -> list[TaskResult]:
        """Execute all tasks and return their results in completion order.

        ``on_queued`` fires once every task has been handed to the queue, before
        any of them settles. ``on_task_done`` fires for each settled task before
        its slot is released.
        """

        queue: asyncio.Queue[Task] = asyncio.Queue()
        for task in tasks:
            queue.put_nowait(task)
        if on_queued is not None:
            on_queued()

        results: list[TaskResult] = []
        workers = [
            asyncio.create_task(self._worker(queue, results, on_task_done))
            for _ in range(min(self.concurrency, len(tasks)))
        ]
        if workers:
            await asyncio.gather(*workers)
        return results

    async def _worker(
        self,
        queue: asyncio.Queue[Task],
        results: list[TaskResult],
        on_task_done: Callable[[TaskResult], None] | None,
    ) -> None:
        while True:
            try:
                task = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            result = await self.execute(task)
            results.append(result)
            if on_task_done is not None:
                try:
                    on_task_done(result)
                except Exception:  # noqa: BLE001
                    logger.exception("Completion handler failed: %s", task.name)

    async def execute(self, task: Task) -> TaskResult:
        """Run one task to settlement and fire its completion callbacks."""

        logger.info("Starting: %s", task.name)
        try:
            if isinstance(task.command, ProcessCommand):
                result = await self._run_process(task, task.command)
            else:
                result = await self._run_callback(task, task.command)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Task failed: %s", task.name)
            result = TaskResult(task=task, outcome=TaskOutcome.FAILED, error=str(exc))

        if result.outcome is TaskOutcome.SUCCEEDED:
            logger.info("Done: %s", task.name)
            if task.on_complete is not None:
                try:
                    task.on_complete(result.stdout)
                except Exception as exc:  # noqa: BLE001
                    logger.exception("on_complete failed: %s", task.name)
                    result.outcome = TaskOutcome.FAILED
                    result.error = str(exc)
        elif result.outcome is TaskOutcome.TIMEOUT:
            logger.error("Timed out after %ss: %s", self.timeout_seconds, task.name)
            if task.on_timeout is not None:
                try:
                    task.on_timeout()
                except Exception:  # noqa: BLE001
                    logger.exception("on_timeout failed: %s", task.name)
        else:
            logger.error("Failed: %s (%s)", task.name, result.error)
        return result

    async def _run_process(self, task: Task, command: ProcessCommand) -> TaskResult:
        try:
            process = await asyncio.create_subprocess_shell(
                command.text,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as error:
            return TaskResult(
                task=task,
                outcome=TaskOutcome.FAILED,
                error=f"failed to start: {error}",
            )
        if process.stdout is None or process.stderr is None:
            raise RuntimeError(f"Process pipes unavailable: {command.text}")

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        async def drain_stdout(pipe: asyncio.StreamReader) -> None:
            async for raw in pipe:
                line = raw.decode("utf-8", errors="replace")
                stdout_lines.append(line)
                logger.debug(line.rstrip("\n"))

        async def drain_stderr(pipe: asyncio.StreamReader) -> None:
            async for raw in pipe:
                line = raw.decode("utf-8", errors="replace")
                stderr_lines.append(line)
                logger.error("exec error: %s", line.rstrip("\n"))

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    drain_stdout(process.stdout),
                    drain_stderr(process.stderr),
                    process.wait(),
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            if self.kill_on_timeout:
                await _terminate_process(process)
            return TaskResult(
                task=task,
                outcome=TaskOutcome.TIMEOUT,
                stdout="".join(stdout_lines),
                error="timeout",
            )

        stdout = "".join(stdout_lines)
        if stderr_lines:
            return TaskResult(
                task=task,
                outcome=TaskOutcome.FAILED,
                exit_code=process.returncode,
                stdout=stdout,
                error="".join(stderr_lines).strip(),
            )
        if process.returncode != 0:
            return TaskResult(
                task=task,
                outcome=TaskOutcome.FAILED,
                exit_code=process.returncode,
                stdout=stdout,
                error=f"exit code {process.returncode}",
            )
        return TaskResult(
            task=task,
            outcome=TaskOutcome.SUCCEEDED,
            exit_code=process.returncode,
            stdout=stdout,
        )

    async def _run_callback(self, task: Task, command: CallbackCommand) -> TaskResult:
        loop = asyncio.get_running_loop()
        finished: asyncio.Future[None] = loop.create_future()

        def _settle() -> None:
            if not finished.done():
                finished.set_result(None)

        def done() -> None:
            loop.call_soon_threadsafe(_settle)

        async def invoke() -> None:
            returned = command.func(done)
            if inspect.isawaitable(returned):
                await returned
            await finished

        try:
            await asyncio.wait_for(invoke(), timeout=self.timeout_seconds)
        except TimeoutError:
            return TaskResult(task=task, outcome=TaskOutcome.TIMEOUT, error="timeout")
        return TaskResult(task=task, outcome=TaskOutcome.SUCCEEDED)


async def _terminate_process(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    if not _signal_group(process, signal.SIGTERM):
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=_TERMINATE_GRACE_SECONDS)
    except TimeoutError:
        _signal_group(process, signal.SIGKILL)
        await process.wait()


def _signal_group(process: asyncio.subprocess.Process, signum: int) -> bool:
    # The shell leads its own session, so every command in a pipeline shares its group.
    try:
        os.killpg(process.pid, signum)
    except OSError:
        return False
    return True
