"""Source folder scanning and web-safe slug derivation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from slugify import slugify


@dataclass(slots=True)
class SourceFile:
    """One source image found in the media folder."""

    slug: str
    extension: str
    src_folder_path: Path
    src_file_name: str

    @property
    def src_file_path(self) -> Path:
        return self.src_folder_path / self.src_file_name

    def public_data(self) -> dict[str, Any]:
        """Fields safe to publish in the public manifest."""

        return {"slug": self.slug, "extension": self.extension}

    def private_data(self) -> dict[str, Any]:
        """Local filesystem details kept out of the public manifest."""

        return {
            "slug": self.slug,
            "src_folder_path": str(self.src_folder_path),
            "src_file_name": self.src_file_name,
            "src_file_path": str(self.src_file_path),
        }


def make_slug(file_name: str) -> str:
    """Slug of a file name without its extension, e.g. ``My Photo!.JPG`` -> ``my-photo``."""

    return slugify(Path(file_name).stem, lowercase=True)


def scan_media_folder(folder: Path, extensions: Iterable[str]) -> list[SourceFile]:
    """Return source files whose extension matches case-insensitively, sorted by name.

    Raises ``ValueError`` when two files map to the same slug.
    """

    if not folder.is_dir():
        raise FileNotFoundError(f"Media folder not found: {folder}")

    valid = {ext.lower().lstrip(".") for ext in extensions}
    found: list[SourceFile] = []
    names_by_slug: dict[str, str] = {}
    for path in sorted(folder.iterdir(), key=lambda p: p.name):
        if not path.is_file():
            continue
        extension = path.suffix.lstrip(".")
        if extension.lower() not in valid:
            continue
        slug = make_slug(path.name)
        if slug in names_by_slug:
            raise ValueError(
                f"Files {names_by_slug[slug]!r} and {path.name!r} share the slug {slug!r}.",
            )
        names_by_slug[slug] = path.name
        found.append(
            SourceFile(
                slug=slug,
                extension=extension,
                src_folder_path=folder,
                src_file_name=path.name,
            ),
        )
    return found
