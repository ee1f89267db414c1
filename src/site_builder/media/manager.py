"""Media folder bookkeeping around the task registry and runner."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from site_builder.config import MediaSettings
from site_builder.media.dependencies import ensure_dependencies
from site_builder.media.manifest import (
    PrivateManifest,
    load_json_document,
    merge_public_metadata,
    read_private_manifest,
    write_private_manifest,
    write_public_manifest,
)
from site_builder.media.scanner import scan_media_folder
from site_builder.tasks import (
    BoundedExecutor,
    CallbackCommand,
    EventBus,
    Item,
    ProcessCommand,
    RunEvent,
    TaskRegistry,
    TaskRunner,
    TasksSnapshot,
    UnknownItemError,
    attach_plugins,
    file_fingerprint,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReadyEvent:
    """Payload of the ``ready`` event."""

    media: list[dict[str, Any]]
    media_folder_path: Path
    manager: MediaManager


class MediaManager:
    """Scans the media folder, loads manifests and runs registered commands.

    Construction fails with ``MissingDependencyError`` before anything is
    scanned if a required binary is absent. ``run()`` persists the public and
    private manifests once every task has settled.
    """

    default_dependencies: ClassVar[tuple[str | dict[str, str], ...]] = ()

    def __init__(
        self,
        settings: MediaSettings,
        *,
        which: Callable[[str], str | None] = shutil.which,
        bus: EventBus | None = None,
    ) -> None:
        settings.validate()
        self.settings = settings
        logging.getLogger("site_builder").setLevel(
            logging.DEBUG if settings.logging == "verbose" else logging.INFO,
        )
        ensure_dependencies(
            (*self.default_dependencies, *settings.dependencies),
            which=which,
        )

        self.bus = bus or EventBus()
        self.executor = BoundedExecutor(
            concurrency=settings.concurrency,
            timeout_seconds=settings.task_timeout_seconds,
            kill_on_timeout=settings.kill_on_timeout,
        )

        existing_public = load_json_document(settings.public_data_path, [])
        self._private = read_private_manifest(settings.private_data_path)

        sources = scan_media_folder(settings.media_folder_path, settings.valid_source_exts)
        self._public_data = merge_public_metadata(
            existing_public if isinstance(existing_public, list) else [],
            [source.public_data() for source in sources],
        )
        self._private_data: list[dict[str, Any]] = []
        items: list[Item] = []
        for source in sources:
            fingerprint = file_fingerprint(source.src_file_path)
            self._private_data.append({**source.private_data(), "src_file_hash": fingerprint})
            items.append(
                Item(
                    slug=source.slug,
                    extension=source.extension,
                    source_path=source.src_file_path,
                    fingerprint=fingerprint,
                ),
            )
        logger.info("Found %d source file(s) in %s", len(items), settings.media_folder_path)

        self.registry = TaskRegistry(
            items,
            self._private.ledger,
            force=settings.force_task,
            media_lookup=self.metadata_by_slug,
        )

    def metadata(self) -> list[dict[str, Any]]:
        return self._public_data

    def metadata_by_slug(self, slug: str) -> dict[str, Any] | None:
        return next((entry for entry in self._public_data if entry["slug"] == slug), None)

    def private_data(self) -> list[dict[str, Any]]:
        return self._private_data

    def private_by_slug(self, slug: str) -> dict[str, Any] | None:
        return next((entry for entry in self._private_data if entry["slug"] == slug), None)

    def source_path(self, slug: str) -> Path:
        entry = self.private_by_slug(slug)
        if entry is None:
            raise UnknownItemError(slug)
        return Path(entry["src_file_path"])

    def on(self, event: RunEvent, handler: Callable[[Any], None]) -> None:
        self.bus.subscribe(event, handler)

    def add_task(  # noqa: PLR0913
        self,
        command: str | Callable[[Callable[[], None]], Any] | ProcessCommand | CallbackCommand,
        slug: str,
        output_path: Path,
        on_complete: Callable[[str], None] | None = None,
        on_timeout: Callable[[], None] | None = None,
    ) -> bool:
        """Register a shell command line or an in-process callback for one item."""

        if isinstance(command, str):
            command = ProcessCommand(command)
        elif not isinstance(command, (ProcessCommand, CallbackCommand)):
            command = CallbackCommand(command)
        return self.registry.register(command, slug, output_path, on_complete, on_timeout)

    def run(self, plugins: tuple[Any, ...] | None = None) -> TasksSnapshot:
        """Emit ``ready``, attach plugins and execute every needed task."""

        ready = ReadyEvent(
            media=self.metadata(),
            media_folder_path=self.settings.media_folder_path,
            manager=self,
        )
        self.bus.emit(RunEvent.READY, ready)
        attach_plugins(
            self.bus,
            self.settings.plugins if plugins is None else plugins,
            ready_payload=ready,
        )

        runner = TaskRunner(
            registry=self.registry,
            executor=self.executor,
            bus=self.bus,
            persist=self.write_manifests,
            media=self.metadata,
        )
        return runner.run()

    def write_manifests(self) -> None:
        write_public_manifest(self.settings.public_data_path, self.metadata())
        write_private_manifest(
            self.settings.private_data_path,
            PrivateManifest(ledger=self._private.ledger, sources=self.private_data()),
        )

    @property
    def ledger_entries(self) -> Mapping[str, Mapping[str, str]]:
        return self._private.ledger.to_mapping()
