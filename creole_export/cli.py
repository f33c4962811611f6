"""
Renders Creole wiki markup to HTML.
`render` prints the HTML for a single file; `export` copies every page of a
wiki into Creole and HTML files.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from .config import (
    ExportConfig,
    apply_overrides,
    build_config,
    load_export_config,
    parse_interwiki_option,
    validate_export_config,
)
from .exceptions import ConfigError, ExportError, RenderFileError
from .exporter import export_documents
from .filesystem import FileSystemSink
from .parser import render_file
from .sources import DirectoryDocumentSource, MongoDocumentSource

__all__ = ["cli"]

logger = logging.getLogger(__name__)


def _render_config(tab_stop: int | None, interwiki: tuple[str, ...]):
    try:
        return build_config(
            Path.cwd(),
            tab_stop=tab_stop,
            interwiki=parse_interwiki_option(interwiki),
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Print progress messages to stderr.")
def cli(verbose: bool):
    """Render Creole wiki markup to HTML."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--tab-stop", type=int, help="Non-breaking spaces per tab (0 keeps tabs).")
@click.option(
    "--interwiki", multiple=True, metavar="SCHEME=URL", help="Interwiki prefix mapping."
)
def render(filepath: str, tab_stop: int | None, interwiki: tuple[str, ...]):
    """
    Print the HTML fragment for a Creole file.

    Args:
        filepath: Path to the Creole file.
        tab_stop: Override for the configured tab stop.
        interwiki: ``SCHEME=URL`` pairs merged into the configured interwiki map.

    Raises:
        click.BadParameter: If the configuration is invalid.
        click.ClickException: If the file cannot be read.

    Examples:
        creole-export render Home.creole --interwiki wiki=https://wiki.example/
    """
    config = _render_config(tab_stop, interwiki)
    try:
        html_fragment = render_file(Path(filepath), config)
    except RenderFileError as error:
        raise click.ClickException(str(error)) from error
    click.echo(html_fragment)


@cli.command()
@click.option("-c", "--connection", help="MongoDB connection string.")
@click.option("-d", "--database", help="Database name.")
@click.option("-o", "--output", type=click.Path(file_okay=False), help="Output directory.")
@click.option(
    "--source-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Read *.creole files from this directory instead of MongoDB.",
)
@click.option("--tab-stop", type=int, help="Non-breaking spaces per tab (0 keeps tabs).")
@click.option(
    "--interwiki", multiple=True, metavar="SCHEME=URL", help="Interwiki prefix mapping."
)
def export(
    connection: str | None,
    database: str | None,
    output: str | None,
    source_dir: str | None,
    tab_stop: int | None,
    interwiki: tuple[str, ...],
):
    """
    Export every wiki page to <output>/Creole and <output>/Html.

    Settings missing from the command line are read from the ``export``
    sub-table of the ``creole-export`` configuration.

    Raises:
        click.BadParameter: If required settings are missing or invalid.
        click.ClickException: If the output directory cannot be prepared or
            any document fails to export.

    Examples:
        creole-export export -c mongodb://localhost -d wiki -o ./export
    """
    config = _render_config(tab_stop, interwiki)
    try:
        export_config: ExportConfig = apply_overrides(
            load_export_config(Path.cwd()),
            connection=connection,
            database=database,
            output=output,
        )
        validate_export_config(export_config, require_database=source_dir is None)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    output_dir = Path(export_config.output)
    logger.info("Output: %s", output_dir)
    if source_dir is not None:
        if Path(source_dir).resolve().is_relative_to(output_dir.resolve()):
            raise click.BadParameter(
                f"{source_dir} is inside the output directory {output_dir}, "
                "whose files are deleted before exporting",
                param_hint="'--source-dir'",
            )
        logger.info("Source directory: %s", source_dir)
        source = DirectoryDocumentSource(Path(source_dir))
    else:
        logger.info("ConnectionString: %s", export_config.connection)
        try:
            source = MongoDocumentSource.from_uri(
                export_config.connection,
                export_config.database,
                export_config.pages_collection,
                export_config.contents_collection,
            )
        except ExportError as error:
            raise click.BadParameter(str(error), param_hint="'--connection'") from error

    with source:
        # List before preparing the output, which deletes files
        try:
            pages = source.list_pages()
        except ExportError as error:
            raise click.ClickException(str(error)) from error

        sink = FileSystemSink(output_dir, warn=lambda message: click.echo(message, err=True))
        try:
            sink.prepare()
        except IOError as error:
            raise click.ClickException(str(error)) from error

        with click.progressbar(length=len(pages), label="Exporting", file=sys.stderr) as bar:
            report = export_documents(
                _ListedSource(source, pages),
                sink,
                config,
                progress=lambda title: bar.update(1),
            )

    click.echo(f"Exported {len(report.exported)} document(s) to {export_config.output}")
    if not report.ok:
        for title, reason in report.failed:
            click.echo(f"  {title}: {reason}", err=True)
        raise click.ClickException(f"{len(report.failed)} document(s) failed to export")


class _ListedSource:
    """Reuse a page listing already fetched to size the progress bar."""

    def __init__(self, source, pages):
        self.source = source
        self.pages = pages

    def list_pages(self):
        return self.pages

    def fetch(self, page):
        return self.source.fetch(page)


if __name__ == "__main__":
    cli()
