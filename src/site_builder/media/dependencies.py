"""Checks for external binaries required by rendition commands."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

DEFAULT_DEPENDENCIES: tuple[str | dict[str, str], ...] = (
    {
        "name": "convert",
        "message": 'Imagemagick required. To install, run:"brew install imagemagick"',
    },
    "pngquant",
)


class MissingDependencyError(RuntimeError):
    """One or more required binaries are not on ``PATH``."""

    def __init__(self, messages: list[str]) -> None:
        noun = "dependencies" if len(messages) > 1 else "dependency"
        super().__init__(
            f"Missing {noun} must be installed:\n" + "\n".join(messages),
        )
        self.messages = messages


@dataclass(frozen=True, slots=True)
class Dependency:
    """External binary with an optional install hint."""

    name: str
    message: str | None = None

    @property
    def missing_message(self) -> str:
        return self.message or (
            f'{self.name} required. You may be able to install with "brew install {self.name}"'
        )


def parse_dependency(raw: str | Mapping[str, str] | Dependency) -> Dependency:
    """Accept a bare binary name or a ``{name, message}`` mapping."""

    if isinstance(raw, Dependency):
        return raw
    if isinstance(raw, str):
        return Dependency(name=raw)
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Dependency must have a name: {raw!r}")
    return Dependency(name=name, message=raw.get("message") or raw.get("customErrorMessage"))


def find_missing_dependencies(
    dependencies: Iterable[str | Mapping[str, str] | Dependency],
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str]:
    """Return install hints for every dependency that cannot be found."""

    missing: list[str] = []
    for raw in dependencies:
        dependency = parse_dependency(raw)
        if which(dependency.name) is None:
            missing.append(dependency.missing_message)
    return missing


def ensure_dependencies(
    dependencies: Iterable[str | Mapping[str, str] | Dependency],
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    missing = find_missing_dependencies(dependencies, which=which)
    if missing:
        raise MissingDependencyError(missing)
