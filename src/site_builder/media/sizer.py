"""Responsive image renditions: standard, retina and cropped widths."""

from __future__ import annotations

import itertools
import logging
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from PIL import Image

from site_builder.config import MediaSettings
from site_builder.media.commands import build_convert_command, rendition_path
from site_builder.media.dependencies import DEFAULT_DEPENDENCIES
from site_builder.media.filters import FilterTable, crop_filter
from site_builder.media.manager import MediaManager
from site_builder.tasks import EventBus, RunEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenditionEvent:
    """Payload of the ``rendition_done`` event."""

    slug: str
    width: int
    is_retina: bool
    input_file_path: Path
    output_file_path: Path


def probe_dimensions(path: Path) -> tuple[int, int]:
    """Return ``(width, height)`` of an image without decoding pixel data."""

    with Image.open(path) as image:
        return image.size


class ImageSizer(MediaManager):
    """Registers one ``convert`` task per rendition of every source image.

    For each width a standard rendition is planned, plus an ``_x2`` retina
    rendition at twice the width when a retina quality is configured. Crop
    boxes found under ``crops`` in an image's public metadata add the same
    pair of renditions per crop label.
    """

    default_dependencies: ClassVar[tuple[str | dict[str, str], ...]] = DEFAULT_DEPENDENCIES

    def __init__(
        self,
        settings: MediaSettings,
        *,
        which: Callable[[str], str | None] = shutil.which,
        bus: EventBus | None = None,
        probe: Callable[[Path], tuple[int, int]] = probe_dimensions,
    ) -> None:
        super().__init__(settings, which=which, bus=bus)
        self.filters = FilterTable(settings.available_filters)
        self._probe = probe
        self._crop_ids = itertools.count(1)
        settings.publish_dir.mkdir(parents=True, exist_ok=True)
        self.plan_renditions()

    def plan_renditions(self) -> None:
        limit = set(self.settings.limit_to_slugs)
        for metadata in self.metadata():
            if limit and metadata["slug"] not in limit:
                continue
            self._plan_item(metadata)

    def _plan_item(self, metadata: dict[str, Any]) -> None:
        settings = self.settings
        slug = metadata["slug"]
        extension = metadata["extension"]
        source = self.source_path(slug)

        width, height = self._probe(source)
        metadata["ratio"] = height / width
        metadata["sizes"] = list(settings.widths)
        metadata["hasRetina"] = settings.retina_quality is not None

        crops: list[tuple[str, list[str]]] = []
        raw_crops = metadata.get("crops")
        if isinstance(raw_crops, Mapping):
            for label, crop in raw_crops.items():
                crop_name = f"crop{next(self._crop_ids)}"
                self.filters.add(crop_name, crop_filter(width, height, crop))
                crops.append((label, [*settings.filters, crop_name]))
                crop["cropped"] = True

        for target_width in settings.widths:
            self._add_pair(slug, extension, source, target_width, list(settings.filters))
            for label, filter_names in crops:
                self._add_pair(
                    slug,
                    extension,
                    source,
                    target_width,
                    filter_names,
                    crop_label=label,
                )

    def _add_pair(  # noqa: PLR0913
        self,
        slug: str,
        extension: str,
        source: Path,
        width: int,
        filter_names: list[str],
        *,
        crop_label: str | None = None,
    ) -> None:
        settings = self.settings
        filters = self.filters.resolve(filter_names)

        output = rendition_path(settings.publish_dir, slug, width, extension, crop_label=crop_label)
        self.add_convert_task(
            slug,
            source,
            output,
            width,
            build_convert_command(
                source, output, extension, width, settings.standard_quality, filters
            ),
        )

        if settings.retina_quality is not None:
            retina_output = rendition_path(
                settings.publish_dir,
                slug,
                width,
                extension,
                crop_label=crop_label,
                retina=True,
            )
            self.add_convert_task(
                slug,
                source,
                retina_output,
                width,
                build_convert_command(
                    source,
                    retina_output,
                    extension,
                    width * 2,
                    settings.retina_quality,
                    filters,
                ),
                is_retina=True,
            )

    def add_convert_task(  # noqa: PLR0913
        self,
        slug: str,
        input_file_path: Path,
        output_file_path: Path,
        width: int,
        convert_cmd: str,
        *,
        is_retina: bool = False,
    ) -> bool:
        def _rendition_done(_stdout: str) -> None:
            self.bus.emit(
                RunEvent.RENDITION_DONE,
                RenditionEvent(
                    slug=slug,
                    width=width,
                    is_retina=is_retina,
                    input_file_path=input_file_path,
                    output_file_path=output_file_path,
                ),
            )

        return self.add_task(convert_cmd, slug, output_file_path, on_complete=_rendition_done)
