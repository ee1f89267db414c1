"""Public and private JSON manifests written after each run."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from site_builder.tasks.ledger import JsonCommandLedger

logger = logging.getLogger(__name__)


def load_json_document(path: Path | None, default: Any) -> Any:
    """Load a JSON document; an absent path or file yields ``default``."""

    if path is None or not path.exists():
        return default
    return json.loads(path.read_text("utf-8"))


def write_json_document(path: Path, payload: Any) -> None:
    """Persist JSON payload pretty-printed, creating parent directories."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", "utf-8")


def merge_public_metadata(
    existing: Iterable[Any],
    scanned: Iterable[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Combine scanned entries with preexisting public metadata for the same slug.

    Preexisting fields such as hand-written crop boxes survive; scanned fields win.
    Entries for slugs that are no longer scanned are dropped.
    """

    by_slug: dict[str, dict[str, Any]] = {}
    for entry in existing:
        if isinstance(entry, dict) and isinstance(entry.get("slug"), str):
            by_slug[entry["slug"]] = entry

    merged: list[dict[str, Any]] = []
    for entry in scanned:
        previous = by_slug.get(entry["slug"])
        if previous is None:
            merged.append(dict(entry))
        else:
            previous.update(entry)
            merged.append(previous)
    return merged


@dataclass(slots=True)
class PrivateManifest:
    """Command ledger plus local source paths; never published."""

    ledger: JsonCommandLedger = field(default_factory=JsonCommandLedger)
    sources: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_document(cls, raw: Any) -> PrivateManifest:
        """Decode a private manifest.

        Documents without a ``ledger`` key are read as a bare
        ``{slug: {signature: fingerprint}}`` mapping.
        """

        if not isinstance(raw, dict):
            return cls()
        if "ledger" not in raw:
            return cls(ledger=JsonCommandLedger.from_mapping(raw))
        sources = raw.get("sources", [])
        return cls(
            ledger=JsonCommandLedger.from_mapping(raw["ledger"]),
            sources=[entry for entry in sources if isinstance(entry, dict)]
            if isinstance(sources, list)
            else [],
        )

    def to_document(self) -> dict[str, Any]:
        return {"ledger": self.ledger.to_mapping(), "sources": self.sources}


def read_private_manifest(path: Path | None) -> PrivateManifest:
    return PrivateManifest.from_document(load_json_document(path, {}))


def write_private_manifest(path: Path | None, manifest: PrivateManifest) -> None:
    if path is None:
        return
    logger.info("Writing private data: %s", path)
    write_json_document(path, manifest.to_document())


def write_public_manifest(path: Path | None, metadata: list[dict[str, Any]]) -> None:
    if path is None:
        return
    logger.info("Writing public data: %s", path)
    write_json_document(path, metadata)
