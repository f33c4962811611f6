"""Document sources feeding the export pipeline."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .constants import CREOLE_SUFFIX, DEFAULT_CONTENTS_COLLECTION, DEFAULT_PAGES_COLLECTION
from .exceptions import DocumentFetchError, ExportError
from .filesystem import safe_read
from .models import PageRef, SourceDocument

logger = logging.getLogger(__name__)

TITLE_FIELD = "Title"
TEXT_FIELD = "Text"
PAGE_FIELD = "Page"


class DocumentSource(Protocol):
    """Anything that can list pages and fetch their markup."""

    def list_pages(self) -> list[PageRef]: ...

    def fetch(self, page: PageRef) -> list[SourceDocument]: ...

    def close(self) -> None: ...


class MongoDocumentSource:
    """Read wiki pages stored in MongoDB.

    Pages are documents of the pages collection carrying a ``Title``; their
    bodies live in the contents collection, each holding the page document
    under ``Page`` and the markup under ``Text``. A page with several stored
    versions yields one document per version, in storage order.

    Args:
        database: A pymongo database, or any mapping of collection names to
            objects offering ``find(filter)``.
        pages_collection: Name of the collection listing pages.
        contents_collection: Name of the collection holding page bodies.
    """

    def __init__(
        self,
        database: Any,
        pages_collection: str = DEFAULT_PAGES_COLLECTION,
        contents_collection: str = DEFAULT_CONTENTS_COLLECTION,
        client: MongoClient | None = None,
    ):
        self.pages = database[pages_collection]
        self.contents = database[contents_collection]
        self.client = client

    @classmethod
    def from_uri(
        cls,
        connection: str,
        database: str,
        pages_collection: str = DEFAULT_PAGES_COLLECTION,
        contents_collection: str = DEFAULT_CONTENTS_COLLECTION,
    ) -> MongoDocumentSource:
        """Connect with `pymongo.MongoClient` and select `database`.

        The returned source owns the client; close it with `close` or use the
        source as a context manager.

        Raises:
            ExportError: If the connection string or its options are rejected.
        """
        try:
            client = MongoClient(connection)
        except PyMongoError as error:
            raise ExportError(f"Invalid connection {connection!r}: {error}") from error
        return cls(client[database], pages_collection, contents_collection, client=client)

    def close(self) -> None:
        """Close the client opened by `from_uri`, if any."""
        if self.client is not None:
            self.client.close()
            self.client = None

    def __enter__(self) -> MongoDocumentSource:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def list_pages(self) -> list[PageRef]:
        """List every page.

        Raises:
            ExportError: If the pages collection cannot be queried.
        """
        try:
            found = list(self.pages.find({}))
        except PyMongoError as error:
            raise ExportError(f"Could not list pages: {error}") from error

        pages = []
        for page in found:
            title = page.get(TITLE_FIELD) if isinstance(page, Mapping) else None
            if not isinstance(title, str):
                logger.warning("Skipping page without a title: %r", page)
                continue
            pages.append(PageRef(title=title, key=page))
        logger.debug("Found %d pages", len(pages))
        return pages

    def fetch(self, page: PageRef) -> list[SourceDocument]:
        """Fetch every stored body of `page`.

        Raises:
            DocumentFetchError: If the query fails or a body has no text.
        """
        try:
            contents = list(self.contents.find({PAGE_FIELD: page.key}))
        except PyMongoError as error:
            raise DocumentFetchError(page.title, str(error)) from error

        documents = []
        for content in contents:
            text = content.get(TEXT_FIELD)
            if not isinstance(text, str):
                raise DocumentFetchError(page.title, f"content has no `{TEXT_FIELD}` string")
            documents.append(SourceDocument(title=page.title, text=text))
        return documents


class DirectoryDocumentSource:
    """Read ``*.creole`` files from a directory, one page per file.

    The page title is the file name without its suffix.
    """

    def __init__(self, directory: Path, suffix: str = CREOLE_SUFFIX):
        self.directory = Path(directory)
        self.suffix = suffix

    def close(self) -> None:
        pass

    def __enter__(self) -> DirectoryDocumentSource:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def list_pages(self) -> list[PageRef]:
        paths = sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file() and path.suffix == self.suffix
        )
        return [PageRef(title=path.stem, key=path) for path in paths]

    def fetch(self, page: PageRef) -> list[SourceDocument]:
        """Read the page's file.

        Raises:
            DocumentFetchError: If the file cannot be read or is not UTF-8.
        """
        try:
            with safe_read(page.key) as file:
                text = file.read()
        except (OSError, UnicodeDecodeError) as error:
            raise DocumentFetchError(page.title, str(error)) from error
        return [SourceDocument(title=page.title, text=text)]
