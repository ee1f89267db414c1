"""Persisted record of which commands already ran against which content."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class CommandLedger(Protocol):
    """Protocol implemented by ledgers consulted at task registration."""

    def needs_run(
        self,
        item_id: str,
        signature: str,
        fingerprint: str,
        output_exists: bool,
        *,
        force: bool = False,
    ) -> bool:
        """Return whether the command must run for the item's current content."""

    def record(self, item_id: str, signature: str, fingerprint: str) -> None:
        """Remember that the command ran against ``fingerprint``."""


class JsonCommandLedger:
    """Dict-backed ledger stored as ``{item_id: {signature: fingerprint}}``."""

    def __init__(self, entries: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._entries: dict[str, dict[str, str]] = {
            item_id: dict(signatures) for item_id, signatures in (entries or {}).items()
        }

    @classmethod
    def from_mapping(cls, raw: object) -> JsonCommandLedger:
        """Build a ledger from a decoded JSON object, ignoring malformed rows."""

        if not isinstance(raw, Mapping):
            return cls()
        entries: dict[str, dict[str, str]] = {}
        for item_id, signatures in raw.items():
            if not isinstance(signatures, Mapping):
                continue
            entries[str(item_id)] = {
                str(signature): value
                for signature, value in signatures.items()
                if isinstance(value, str)
            }
        return cls(entries)

    def to_mapping(self) -> dict[str, dict[str, str]]:
        return {item_id: dict(signatures) for item_id, signatures in self._entries.items()}

    def lookup(self, item_id: str, signature: str) -> str | None:
        return self._entries.get(item_id, {}).get(signature)

    def needs_run(
        self,
        item_id: str,
        signature: str,
        fingerprint: str,
        output_exists: bool,
        *,
        force: bool = False,
    ) -> bool:
        recorded = self.lookup(item_id, signature)
        if recorded is None:
            return True
        if recorded != fingerprint:
            return True
        if not output_exists:
            return True
        return force

    def record(self, item_id: str, signature: str, fingerprint: str) -> None:
        self._entries.setdefault(item_id, {})[signature] = fingerprint

    def __len__(self) -> int:
        return sum(len(signatures) for signatures in self._entries.values())
