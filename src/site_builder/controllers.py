"""Controllers for site-builder CLI commands."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from site_builder.config import DocSettings, MediaSettings, Settings
from site_builder.docs import GoogleDocClient, parse_document
from site_builder.media import ImageSizer
from site_builder.media.manifest import write_json_document
from site_builder.tasks import RunEvent, TaskDoneEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MediaRunCommand:
    """CLI input for one image rendition run."""

    media_folder: Path | None = None
    publish_dir: Path | None = None
    public_data_path: Path | None = None
    private_data_path: Path | None = None
    widths: tuple[int, ...] = ()
    filters: tuple[str, ...] = ()
    slugs: tuple[str, ...] = ()
    concurrency: int | None = None
    force: bool = False
    verbose: bool = False


@dataclass(slots=True)
class MediaRunResult:
    """Run report to render in CLI."""

    lines: list[str]
    success: bool


@dataclass(slots=True)
class DocDownloadCommand:
    """CLI input for Google Doc download."""

    doc_id: str | None = None
    output_path: Path | None = None


class MediaCliController:
    """Builds media settings from env plus CLI overrides and runs the sizer."""

    def __init__(self, which: Callable[[str], str | None] | None = None) -> None:
        self._which = which

    def run(self, command: MediaRunCommand) -> MediaRunResult:
        settings = _media_settings(Settings.from_env().media, command)
        kwargs = {"which": self._which} if self._which is not None else {}
        sizer = ImageSizer(settings, **kwargs)

        failures: list[TaskDoneEvent] = []

        def _collect(event: TaskDoneEvent) -> None:
            if not event.result.succeeded:
                failures.append(event)

        sizer.on(RunEvent.TASK_DONE, _collect)
        snapshot = sizer.run()

        lines = [
            f"Images: {len(sizer.metadata())} in {settings.media_folder_path}",
            "Tasks: "
            f"requested={snapshot.number_of_tasks_requested} "
            f"needed={snapshot.number_of_tasks_needed} "
            f"run={snapshot.number_of_tasks_run}",
        ]
        lines += [
            f"{event.result.outcome.value.upper()}: {event.cmd} ({event.result.error})"
            for event in failures
        ]
        return MediaRunResult(lines=lines, success=not failures)


class DocCliController:
    """Downloads a Google Doc and writes its ArchieML structure as JSON."""

    def download(self, command: DocDownloadCommand) -> list[str]:
        settings = _doc_settings(Settings.from_env().doc, command)
        settings.validate()

        with GoogleDocClient(
            timeout_seconds=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
        ) as client:
            html = client.download(settings.doc_id)

        parsed = parse_document(html)
        write_json_document(settings.output_path, parsed)
        logger.info("Saved data to %s", settings.output_path)
        return [f"Saved data to {settings.output_path}"]


def _media_settings(base: MediaSettings, command: MediaRunCommand) -> MediaSettings:
    settings = replace(base)
    if command.media_folder is not None:
        settings.media_folder_path = command.media_folder
    if command.publish_dir is not None:
        settings.publish_dir = command.publish_dir
    if command.public_data_path is not None:
        settings.public_data_path = command.public_data_path
    if command.private_data_path is not None:
        settings.private_data_path = command.private_data_path
    if command.widths:
        settings.widths = command.widths
    if command.filters:
        settings.filters = command.filters
    if command.slugs:
        settings.limit_to_slugs = command.slugs
    if command.concurrency is not None:
        settings.concurrency = command.concurrency
    if command.force:
        settings.force_task = True
    if command.verbose:
        settings.logging = "verbose"
    return settings


def _doc_settings(base: DocSettings, command: DocDownloadCommand) -> DocSettings:
    settings = replace(base)
    if command.doc_id:
        settings.doc_id = command.doc_id
    if command.output_path is not None:
        settings.output_path = command.output_path
    return settings
