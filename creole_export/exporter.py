"""Batch export of wiki pages to Creole and HTML files."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from .config import CreoleConfig, validate_config
from .exceptions import ExportError
from .models import ExportReport, LinkHook, SourceDocument
from .parser import render_creole
from .sources import DocumentSource

logger = logging.getLogger(__name__)


class DocumentSink(Protocol):
    """Anything that can persist a document's markup and HTML."""

    def write(self, title: str, raw: str, rendered: str) -> None: ...


def export_document(
    document: SourceDocument,
    sink: DocumentSink,
    config: CreoleConfig,
    link_hook: LinkHook | None = None,
) -> None:
    """Render one document and hand it to `sink`.

    Raises:
        ExportError: If the sink cannot persist the document.
    """
    rendered = render_creole(document.text, config, link_hook)
    sink.write(document.title, document.text, rendered)
    logger.debug("Exported %r (%d characters of HTML)", document.title, len(rendered))


def export_documents(
    source: DocumentSource,
    sink: DocumentSink,
    config: CreoleConfig | None = None,
    link_hook: LinkHook | None = None,
    progress: Callable[[str], None] | None = None,
) -> ExportReport:
    """Export every page of `source` into `sink`.

    A page that cannot be fetched, or a document that cannot be written, is
    logged and recorded in the report; the remaining pages are still
    exported. Each document is rendered independently.

    Args:
        source: Where pages and their markup come from.
        sink: Where raw markup and HTML are written.
        config: Render configuration. Defaults to a new `CreoleConfig`.
        link_hook: Optional link callback passed to every render.
        progress: Optional callback invoked with each page title once the page
            has been processed.

    Returns:
        ExportReport: Exported titles and failures.

    Raises:
        ConfigError: If the configuration fails validation.

    Examples:
        report = export_documents(DirectoryDocumentSource(src), FileSystemSink(out))
    """
    config = config or CreoleConfig()
    validate_config(config)
    report = ExportReport()

    for page in source.list_pages():
        try:
            documents = source.fetch(page)
        except ExportError as error:
            logger.warning("%s", error)
            report.failed.append((page.title, str(error)))
        else:
            if not documents:
                logger.info("Page %r has no content", page.title)
            for document in documents:
                try:
                    export_document(document, sink, config, link_hook)
                except ExportError as error:
                    logger.warning("%s", error)
                    report.failed.append((document.title, str(error)))
                else:
                    report.exported.append(document.title)

        if progress is not None:
            progress(page.title)

    logger.info("Exported %d documents, %d failures", len(report.exported), len(report.failed))
    return report
