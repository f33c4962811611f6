"""Filesystem helpers for creole-export."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .constants import CREOLE_DIRNAME, CREOLE_SUFFIX, HTML_DIRNAME, HTML_SUFFIX
from .exceptions import DocumentWriteError


def safe_read(filepath: Path) -> TextIO:
    """Open a file for reading with consistent error handling.

    Args:
        filepath: Path to the file.

    Returns:
        TextIO: File handle opened for reading in UTF-8.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.

    Examples:
        with safe_read(Path("Home.creole")) as handle:
            markup = handle.read()
    """
    try:
        return open(filepath, "r", encoding="UTF-8")
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def document_filename(title: str, suffix: str) -> str:
    """Build the output file name for a page title.

    Args:
        title: Page title.
        suffix: File extension including the dot.

    Returns:
        str: ``title + suffix``.

    Raises:
        DocumentWriteError: If the title is empty, ``.`` or ``..``, or contains a
            path separator or NUL, any of which would escape the output folder.

    Examples:
        document_filename("Home", ".html")  # "Home.html"
    """
    if not title or title in (".", ".."):
        raise DocumentWriteError(title, "title is not a usable file name")
    if any(character in title for character in ("/", "\\", "\x00")):
        raise DocumentWriteError(title, "title contains a path separator")
    return f"{title}{suffix}"


def prepare_output_directories(base_dir: Path) -> tuple[Path, Path]:
    """Create the output layout and empty it of files left by a previous run.

    Plain files directly inside `base_dir`, ``Creole`` and ``Html`` are
    deleted; sub-directories are left in place.

    Args:
        base_dir: Root output directory; created when missing.

    Returns:
        tuple[Path, Path]: The ``Creole`` and ``Html`` directories.

    Raises:
        IOError: If one of the directories is a symlink or cannot be created
            or cleaned.

    Examples:
        creole_dir, html_dir = prepare_output_directories(Path("export"))
    """
    creole_dir = base_dir / CREOLE_DIRNAME
    html_dir = base_dir / HTML_DIRNAME

    for directory in (base_dir, creole_dir, html_dir):
        if directory.is_symlink():
            error_message = f"Symlinks are not supported for security reasons: {directory}"
            raise IOError(error_message)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            for entry in directory.iterdir():
                if entry.is_file() or entry.is_symlink():
                    entry.unlink()
        except OSError as error:
            error_message = f"Error preparing {directory}: {error}"
            raise IOError(error_message) from error

    return creole_dir, html_dir


def write_text_atomic(filepath: Path, content: str) -> None:
    """Write `content` to `filepath` as UTF-8 through a temporary file.

    The file is flushed and synced before it replaces any existing file, so
    readers never observe a partially written document.

    Raises:
        OSError: If the temporary file cannot be written or moved into place.
    """
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent, newline=""
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())

        os.replace(temp_path, filepath)
    finally:
        if temp_path is not None:
            try:
                Path(temp_path).unlink(missing_ok=True)
            except OSError:
                pass


class FileSystemSink:
    """Persist raw markup and rendered HTML under an output directory.

    Raw markup goes to ``<base>/Creole/<title>.creole`` and HTML to
    ``<base>/Html/<title>.html``.

    Args:
        base_dir: Root output directory.
        warn: Optional callback for non-fatal warnings.
    """

    def __init__(self, base_dir: Path, warn: Callable[[str], None] | None = None):
        self.base_dir = Path(base_dir)
        self.creole_dir = self.base_dir / CREOLE_DIRNAME
        self.html_dir = self.base_dir / HTML_DIRNAME
        self.warn = warn
        self._written: set[str] = set()

    def prepare(self) -> None:
        """Create the output directories, removing files from earlier runs."""
        self.creole_dir, self.html_dir = prepare_output_directories(self.base_dir)

    def write(self, title: str, raw: str, rendered: str) -> None:
        """Write one document.

        Raises:
            DocumentWriteError: If the title cannot be used as a file name or
                either file cannot be written.
        """
        creole_path = self.creole_dir / document_filename(title, CREOLE_SUFFIX)
        html_path = self.html_dir / document_filename(title, HTML_SUFFIX)

        if title in self._written and self.warn is not None:
            self.warn(f"Warning: {title!r} was exported more than once; keeping the last version")

        try:
            write_text_atomic(creole_path, raw)
            write_text_atomic(html_path, rendered)
        except OSError as error:
            raise DocumentWriteError(title, str(error)) from error

        self._written.add(title)
