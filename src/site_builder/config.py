"""Runtime configuration for media processing and document download."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_WIDTHS: tuple[int, ...] = (180, 300, 460, 720, 1050, 1440, 2000)
DEFAULT_SOURCE_EXTS: tuple[str, ...] = ("jpg", "png")
LOGGING_LEVELS = ("info", "verbose")


@dataclass(slots=True)
class MediaSettings:
    """Image rendition settings."""

    media_folder_path: Path = Path("assets/images")
    valid_source_exts: tuple[str, ...] = DEFAULT_SOURCE_EXTS
    widths: tuple[int, ...] = DEFAULT_WIDTHS
    standard_quality: int = 80
    retina_quality: int | None = 80
    publish_dir: Path = Path("static/images")
    public_data_path: Path | None = Path("data/imagedata.json")
    private_data_path: Path | None = Path("tmp/imagedata.json")
    force_task: bool = False
    concurrency: int = 1
    task_timeout_seconds: int = 600
    kill_on_timeout: bool = True
    dependencies: tuple[str | dict[str, str], ...] = ()
    available_filters: dict[str, str] = field(default_factory=dict)
    filters: tuple[str, ...] = ()
    limit_to_slugs: tuple[str, ...] = ()
    plugins: tuple[Any, ...] = ()
    logging: str = "info"

    def validate(self) -> None:
        """Raise configuration error for values that cannot produce a run."""

        if not self.valid_source_exts:
            raise ValueError("SITE_BUILDER_MEDIA_EXTS must list at least one extension.")
        if not self.widths:
            raise ValueError("SITE_BUILDER_MEDIA_WIDTHS must list at least one width.")
        for width in self.widths:
            if width <= 0:
                raise ValueError(f"Rendition widths must be positive: {width!r}")
        _validate_quality("SITE_BUILDER_MEDIA_STANDARD_QUALITY", self.standard_quality)
        if self.retina_quality is not None:
            _validate_quality("SITE_BUILDER_MEDIA_RETINA_QUALITY", self.retina_quality)
        if self.concurrency < 1:
            raise ValueError("SITE_BUILDER_MEDIA_CONCURRENCY must be >= 1.")
        if self.task_timeout_seconds <= 0:
            raise ValueError("SITE_BUILDER_MEDIA_TASK_TIMEOUT_SECONDS must be > 0.")
        if self.logging not in LOGGING_LEVELS:
            raise ValueError(
                f"Invalid logging level {self.logging!r}. Expected one of {LOGGING_LEVELS}.",
            )


@dataclass(slots=True)
class DocSettings:
    """Google Doc download settings."""

    doc_id: str = ""
    output_path: Path = Path("data/doc.json")
    request_timeout_seconds: float = 30.0
    max_retries: int = 3

    def validate(self) -> None:
        if not self.doc_id.strip():
            raise ValueError(
                "A Google Doc id is required. Set SITE_BUILDER_DOC_ID or pass --doc-id.",
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError("SITE_BUILDER_DOC_REQUEST_TIMEOUT_SECONDS must be > 0.")
        if self.max_retries < 0:
            raise ValueError("SITE_BUILDER_DOC_MAX_RETRIES must be >= 0.")


@dataclass(slots=True)
class Settings:
    """Application settings grouped by command."""

    media: MediaSettings = field(default_factory=MediaSettings)
    doc: DocSettings = field(default_factory=DocSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults matching the site layout."""

        retina_raw = os.getenv("SITE_BUILDER_MEDIA_RETINA_QUALITY", "80").strip()
        return cls(
            media=MediaSettings(
                media_folder_path=Path(
                    os.getenv("SITE_BUILDER_MEDIA_FOLDER", "assets/images"),
                ),
                valid_source_exts=_env_csv("SITE_BUILDER_MEDIA_EXTS", DEFAULT_SOURCE_EXTS),
                widths=_env_int_list("SITE_BUILDER_MEDIA_WIDTHS", DEFAULT_WIDTHS),
                standard_quality=int(os.getenv("SITE_BUILDER_MEDIA_STANDARD_QUALITY", "80")),
                retina_quality=int(retina_raw) if retina_raw else None,
                publish_dir=Path(os.getenv("SITE_BUILDER_MEDIA_PUBLISH_DIR", "static/images")),
                public_data_path=_env_optional_path(
                    "SITE_BUILDER_MEDIA_PUBLIC_DATA_PATH",
                    "data/imagedata.json",
                ),
                private_data_path=_env_optional_path(
                    "SITE_BUILDER_MEDIA_PRIVATE_DATA_PATH",
                    "tmp/imagedata.json",
                ),
                force_task=_env_bool("SITE_BUILDER_MEDIA_FORCE", default=False),
                concurrency=int(os.getenv("SITE_BUILDER_MEDIA_CONCURRENCY", "1")),
                task_timeout_seconds=int(
                    os.getenv("SITE_BUILDER_MEDIA_TASK_TIMEOUT_SECONDS", "600"),
                ),
                kill_on_timeout=_env_bool("SITE_BUILDER_MEDIA_KILL_ON_TIMEOUT", default=True),
                filters=_env_csv("SITE_BUILDER_MEDIA_FILTERS", ()),
                limit_to_slugs=_env_csv("SITE_BUILDER_MEDIA_SLUGS", ()),
                logging=os.getenv("SITE_BUILDER_LOGGING", "info").strip().lower(),
            ),
            doc=DocSettings(
                doc_id=os.getenv("SITE_BUILDER_DOC_ID", "").strip(),
                output_path=Path(os.getenv("SITE_BUILDER_DOC_OUTPUT", "data/doc.json")),
                request_timeout_seconds=float(
                    os.getenv("SITE_BUILDER_DOC_REQUEST_TIMEOUT_SECONDS", "30.0"),
                ),
                max_retries=int(os.getenv("SITE_BUILDER_DOC_MAX_RETRIES", "3")),
            ),
        )


def _validate_quality(name: str, value: int) -> None:
    if not 1 <= value <= 100:
        raise ValueError(f"{name} must be between 1 and 100, got {value!r}.")


def _env_csv(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _env_int_list(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    values: list[int] = []
    for token in _env_csv(name, ()):
        try:
            values.append(int(token))
        except ValueError as error:
            raise ValueError(f"Invalid integer in {name}: {token!r}") from error
    return tuple(values) if values else default


def _env_optional_path(name: str, default: str) -> Path | None:
    raw = os.getenv(name, default).strip()
    return Path(raw) if raw else None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
