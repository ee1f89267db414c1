from __future__ import annotations

import json
import os
from pathlib import Path

import allure
import pytest
from click.testing import CliRunner
from PIL import Image

from site_builder import __version__
from site_builder.controllers import MediaCliController, MediaRunCommand
from site_builder.main import site_builder

pytestmark = [
    allure.epic("CLI"),
    allure.feature("Commands"),
]

FAILING_CONVERT = "#!/bin/sh\necho 'convert: no decode delegate' >&2\nexit 1\n"
WRITING_CONVERT = '#!/bin/sh\nfor last; do :; done\nprintf rendered > "$last"\n'


def _install_fake_tools(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, convert: str) -> None:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    for name, script in (("convert", convert), ("pngquant", "#!/bin/sh\ncat\n")):
        path = bin_dir / name
        path.write_text(script, "utf-8")
        path.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")


@pytest.fixture()
def photo_folder(tmp_path: Path) -> Path:
    folder = tmp_path / "photos"
    folder.mkdir()
    Image.new("RGB", (400, 300), "navy").save(folder / "Harbour View.jpg")
    return folder


def _media_command(tmp_path: Path, folder: Path) -> MediaRunCommand:
    return MediaRunCommand(
        media_folder=folder,
        publish_dir=tmp_path / "static",
        public_data_path=tmp_path / "data" / "imagedata.json",
        private_data_path=tmp_path / "tmp" / "imagedata.json",
        widths=(100, 200),
    )


def test_version_option() -> None:
    result = CliRunner().invoke(site_builder, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_media_reports_missing_dependencies(tmp_path: Path) -> None:
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()

    result = CliRunner().invoke(site_builder, ["media"], env={"PATH": str(empty_bin)})

    assert result.exit_code == 1
    assert "Imagemagick required" in result.output


def test_media_command_reports_failed_renditions(
    tmp_path: Path,
    photo_folder: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_fake_tools(tmp_path, monkeypatch, FAILING_CONVERT)

    result = CliRunner().invoke(
        site_builder,
        [
            "media",
            "--media-folder",
            str(photo_folder),
            "--publish-dir",
            str(tmp_path / "static"),
            "--public-data",
            str(tmp_path / "data" / "imagedata.json"),
            "--private-data",
            str(tmp_path / "tmp" / "imagedata.json"),
            "--width",
            "100",
        ],
    )

    assert result.exit_code == 1
    assert "Tasks: requested=2 needed=2 run=0" in result.output
    assert result.output.count("FAILED: convert") == 2
    assert "Some renditions failed." in result.output


def test_media_controller_skips_up_to_date_renditions(
    tmp_path: Path,
    photo_folder: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_fake_tools(tmp_path, monkeypatch, WRITING_CONVERT)
    command = _media_command(tmp_path, photo_folder)

    first = MediaCliController().run(command)
    second = MediaCliController().run(command)

    assert first.success
    assert first.lines == [
        f"Images: 1 in {photo_folder}",
        "Tasks: requested=4 needed=4 run=4",
    ]
    assert second.lines[1] == "Tasks: requested=4 needed=0 run=0"
    assert (tmp_path / "static" / "harbour-view-200_x2.jpg").read_text("utf-8") == "rendered"

    public = json.loads((tmp_path / "data" / "imagedata.json").read_text("utf-8"))
    assert public == [
        {
            "slug": "harbour-view",
            "extension": "jpg",
            "ratio": 0.75,
            "sizes": [100, 200],
            "hasRetina": True,
        },
    ]


def test_media_controller_uses_injected_dependency_lookup(
    tmp_path: Path,
    photo_folder: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_fake_tools(tmp_path, monkeypatch, FAILING_CONVERT)
    looked_up: list[str] = []

    def which(name: str) -> str:
        looked_up.append(name)
        return f"/opt/bin/{name}"

    result = MediaCliController(which=which).run(_media_command(tmp_path, photo_folder))

    assert looked_up == ["convert", "pngquant"]
    assert not result.success
    assert all(line.startswith("FAILED: convert") for line in result.lines[2:])
    assert "(convert: no decode delegate)" in result.lines[2]


def test_doc_command_saves_archieml_json(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    requested: list[str] = []

    class FakeClient:
        def __init__(self, **_: object) -> None:
            pass

        def __enter__(self) -> FakeClient:
            return self

        def __exit__(self, *_: object) -> None:
            return None

        def download(self, doc_id: str) -> str:
            requested.append(doc_id)
            return "<html><body><p>headline: Hello</p><p>byline: Staff</p></body></html>"

    monkeypatch.setattr("site_builder.controllers.GoogleDocClient", FakeClient)
    output = tmp_path / "data" / "doc.json"

    result = CliRunner().invoke(
        site_builder,
        ["doc", "--doc-id", "abc123", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert requested == ["abc123"]
    assert f"Saved data to {output}" in result.output
    assert json.loads(output.read_text("utf-8")) == {"headline": "Hello", "byline": "Staff"}


def test_doc_command_requires_doc_id(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SITE_BUILDER_DOC_ID", raising=False)

    result = CliRunner().invoke(site_builder, ["doc"])

    assert result.exit_code == 1
    assert "Google Doc id is required" in result.output
