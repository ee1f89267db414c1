"""Shell command lines for ImageMagick / pngquant renditions."""

from __future__ import annotations

import shlex
from pathlib import Path


def build_convert_command(  # noqa: PLR0913
    input_path: Path,
    output_path: Path,
    extension: str,
    width: int,
    quality: int,
    filters: str = "",
) -> str:
    """Render the ``convert`` command producing one rendition.

    PNG output is piped through ``pngquant`` for lossy compression.
    """

    parts = ["convert", shlex.quote(str(input_path)), "-quality", str(quality)]
    if filters:
        parts.append(filters)
    parts += ["-thumbnail", f"{width}x"]

    if extension.lower() == "png":
        parts += [
            "png:-",
            "|",
            "pngquant",
            "--skip-if-larger",
            "-",
            ">",
            shlex.quote(str(output_path)),
        ]
    else:
        parts.append(shlex.quote(str(output_path)))
    return " ".join(parts)


def rendition_path(  # noqa: PLR0913
    publish_dir: Path,
    slug: str,
    width: int,
    extension: str,
    *,
    crop_label: str | None = None,
    retina: bool = False,
) -> Path:
    """Output path such as ``<publish_dir>/hero-wide-720_x2.jpg``."""

    stem = f"{slug}-{crop_label}" if crop_label else slug
    suffix = "_x2" if retina else ""
    return publish_dir / f"{stem}-{width}{suffix}.{extension}"
