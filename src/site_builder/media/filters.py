"""Named ImageMagick filter flags."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_FILTERS: dict[str, str] = {
    "strip": "-strip",
    "bw": "-colorspace Gray",
    "blur": "-blur 0x5",
}


class FilterTable:
    """Maps filter names to ``convert`` flags; user entries extend the defaults."""

    def __init__(self, extra: Mapping[str, str] | None = None) -> None:
        self._filters: dict[str, str] = dict(DEFAULT_FILTERS)
        self._filters.update(extra or {})

    def add(self, name: str, flag: str) -> None:
        self._filters[name] = flag

    def get(self, name: str) -> str | None:
        return self._filters.get(name)

    def resolve(self, names: Iterable[str]) -> str:
        """Space-joined flags for the requested names; unknown names are skipped."""

        flags: list[str] = []
        for name in names:
            flag = self._filters.get(name)
            if flag is None:
                logger.warning("Unknown filter: %s", name)
                continue
            flags.append(flag)
        return " ".join(flags)

    def __contains__(self, name: object) -> bool:
        return name in self._filters


def crop_filter(width: int, height: int, crop: Mapping[str, Any]) -> str:
    """Translate a percentage crop box into a ``-crop WxH+X+Y`` flag.

    ``crop`` holds ``x1``, ``y1``, ``x2`` and ``y2`` as percentages of the
    source image dimensions.
    """

    x1, y1 = float(crop["x1"]), float(crop["y1"])
    x2, y2 = float(crop["x2"]), float(crop["y2"])
    start_x = _round_half_up(width * (x1 / 100))
    start_y = _round_half_up(height * (y1 / 100))
    crop_width = _round_half_up(((x2 - x1) * width) / 100)
    crop_height = _round_half_up(((y2 - y1) * height) / 100)
    return f"-crop {crop_width}x{crop_height}+{start_x}+{start_y}"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
