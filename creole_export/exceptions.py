"""Package-specific exception types."""

from __future__ import annotations


class CreoleExportError(Exception):
    """Base class for errors raised by creole-export."""


class ConfigError(CreoleExportError, ValueError):
    """Raised when configuration values are invalid.

    Examples:
        raise ConfigError("`tab_stop` must be >= 0")
    """


class RenderFileError(CreoleExportError):
    """Raised when a markup file cannot be read for rendering."""


class ExportError(CreoleExportError, OSError):
    """Base class for per-document failures in the export pipeline."""


class DocumentFetchError(ExportError):
    """Raised when a page's documents cannot be fetched from the source.

    Args:
        title: Title of the page being fetched.
        reason: Human readable cause.
    """

    def __init__(self, title: str, reason: str):
        self.title = title
        self.reason = reason
        super().__init__(f"Could not fetch {title!r}: {reason}")


class DocumentWriteError(ExportError):
    """Raised when a rendered document cannot be persisted.

    Args:
        title: Title of the document being written.
        reason: Human readable cause.
    """

    def __init__(self, title: str, reason: str):
        self.title = title
        self.reason = reason
        super().__init__(f"Could not write {title!r}: {reason}")
