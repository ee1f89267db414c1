"""Admission point that filters requested commands down to needed tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from site_builder.tasks.ledger import CommandLedger
from site_builder.tasks.models import Command, Item, Task, TasksSnapshot, command_signature

logger = logging.getLogger(__name__)


class UnknownItemError(LookupError):
    """Registration referenced an item id that the scan did not produce."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Unknown item: {item_id!r}")
        self.item_id = item_id


class TaskRegistry:
    """Collects requested commands and keeps the subset that must run."""

    def __init__(
        self,
        items: Iterable[Item],
        ledger: CommandLedger,
        *,
        force: bool = False,
        media_lookup: Callable[[str], dict[str, Any] | None] | None = None,
    ) -> None:
        self._items = {item.slug: item for item in items}
        self._ledger = ledger
        self._force = force
        self._media_lookup = media_lookup
        self.requested: list[str] = []
        self.needed: list[Task] = []

    def item(self, item_id: str) -> Item:
        try:
            return self._items[item_id]
        except KeyError as error:
            raise UnknownItemError(item_id) from error

    def register(  # noqa: PLR0913
        self,
        command: Command,
        item_id: str,
        output_path: Path,
        on_complete: Callable[[str], None] | None = None,
        on_timeout: Callable[[], None] | None = None,
    ) -> bool:
        """Register one command for an item; return whether it was admitted."""

        item = self.item(item_id)
        signature = command_signature(command)
        needed = self._ledger.needs_run(
            item_id,
            signature,
            item.fingerprint,
            output_path.exists(),
            force=self._force,
        )
        if needed:
            self._ledger.record(item_id, signature, item.fingerprint)
            self.needed.append(
                Task(
                    command=command,
                    item_id=item_id,
                    output_path=output_path,
                    signature=signature,
                    media=self._media_lookup(item_id) if self._media_lookup else None,
                    on_complete=on_complete,
                    on_timeout=on_timeout,
                ),
            )
        else:
            logger.debug("Up to date: %s", command.name)
        self.requested.append(signature)
        return needed

    def snapshot(
        self,
        *,
        tasks_run: int = 0,
        media: list[dict[str, Any]] | None = None,
    ) -> TasksSnapshot:
        return TasksSnapshot(
            number_of_tasks_requested=len(self.requested),
            number_of_tasks_needed=len(self.needed),
            number_of_tasks_run=tasks_run,
            needed_tasks=list(self.needed),
            tasks_requested=list(self.requested),
            media=list(media or []),
        )
