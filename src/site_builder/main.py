"""CLI entrypoint for site-builder."""

from __future__ import annotations

import logging
from pathlib import Path

import rich_click as click
from rich.logging import RichHandler

from site_builder import __version__
from site_builder.controllers import (
    DocCliController,
    DocDownloadCommand,
    MediaCliController,
    MediaRunCommand,
)
from site_builder.docs import DocDownloadError
from site_builder.media import MissingDependencyError
from site_builder.tasks import UnknownItemError

click.rich_click.USE_MARKDOWN = True
MEDIA_CONTROLLER = MediaCliController()
DOC_CONTROLLER = DocCliController()

_KNOWN_ERRORS = (
    MissingDependencyError,
    UnknownItemError,
    DocDownloadError,
    FileNotFoundError,
    ValueError,
)


@click.group()
@click.version_option(version=__version__, prog_name="site-builder")
@click.option(
    "--verbose",
    is_flag=True,
    envvar="SITE_BUILDER_VERBOSE",
    help="Log streamed command output and skipped tasks.",
)
def site_builder(verbose: bool) -> None:
    """Static-site build helpers."""

    _configure_logging(verbose)


@site_builder.command("media")
@click.option(
    "--media-folder",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Folder with source images.",
)
@click.option(
    "--publish-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Folder receiving the renditions.",
)
@click.option(
    "--public-data",
    "public_data_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Public manifest path.",
)
@click.option(
    "--private-data",
    "private_data_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Private manifest (ledger) path.",
)
@click.option(
    "--width",
    "widths",
    type=click.IntRange(min=1),
    multiple=True,
    help="Rendition width. Can be repeated.",
)
@click.option(
    "--filter",
    "filters",
    multiple=True,
    help="Named filter applied to every rendition, for example bw. Can be repeated.",
)
@click.option(
    "--slug",
    "slugs",
    multiple=True,
    help="Only process these image slugs. Can be repeated.",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Max number of commands running at once.",
)
@click.option(
    "--force/--no-force",
    default=False,
    show_default=True,
    help="Run every command even if its output is up to date.",
)
@click.pass_context
def media(  # noqa: PLR0913
    ctx: click.Context,
    media_folder: Path | None,
    publish_dir: Path | None,
    public_data_path: Path | None,
    private_data_path: Path | None,
    widths: tuple[int, ...],
    filters: tuple[str, ...],
    slugs: tuple[str, ...],
    concurrency: int | None,
    force: bool,
) -> None:
    """Generate resized, retina and cropped image renditions."""

    try:
        result = MEDIA_CONTROLLER.run(
            MediaRunCommand(
                media_folder=media_folder,
                publish_dir=publish_dir,
                public_data_path=public_data_path,
                private_data_path=private_data_path,
                widths=widths,
                filters=filters,
                slugs=slugs,
                concurrency=concurrency,
                force=force,
                verbose=bool(ctx.parent and ctx.parent.params.get("verbose")),
            ),
        )
    except _KNOWN_ERRORS as error:
        raise click.ClickException(str(error)) from error

    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Some renditions failed.")


@site_builder.command("doc")
@click.option("--doc-id", default=None, help="Google Doc id. Defaults to SITE_BUILDER_DOC_ID.")
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="JSON output path.",
)
def doc(doc_id: str | None, output_path: Path | None) -> None:
    """Download a Google Doc and save its ArchieML data as JSON."""

    try:
        lines = DOC_CONTROLLER.download(
            DocDownloadCommand(doc_id=doc_id, output_path=output_path),
        )
    except _KNOWN_ERRORS as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    site_builder()
