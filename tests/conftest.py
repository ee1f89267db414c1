"""Shared test fixtures."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from site_builder.config import MediaSettings


def python_command(code: str) -> str:
    """Shell command line running ``code`` with the current interpreter."""

    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


def find_everything(name: str) -> str:
    return f"/usr/local/bin/{name}"


@pytest.fixture()
def media_folder(tmp_path: Path) -> Path:
    folder = tmp_path / "assets" / "images"
    folder.mkdir(parents=True)
    (folder / "Hero Shot.jpg").write_bytes(b"hero-v1")
    (folder / "logo.PNG").write_bytes(b"logo-v1")
    (folder / "notes.txt").write_text("ignored", "utf-8")
    return folder


@pytest.fixture()
def media_settings(tmp_path: Path, media_folder: Path) -> MediaSettings:
    return MediaSettings(
        media_folder_path=media_folder,
        widths=(100, 200),
        publish_dir=tmp_path / "static" / "images",
        public_data_path=tmp_path / "data" / "imagedata.json",
        private_data_path=tmp_path / "tmp" / "imagedata.json",
    )
