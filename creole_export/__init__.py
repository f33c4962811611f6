"""
creole-export: Render Creole wiki markup to HTML and export wikis to files.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    creole-export render Home.creole
    creole-export export -c mongodb://localhost -d wiki -o ./export

Library Usage:
    from creole_export import CreoleConfig, LinkTarget, render_creole

    def classify(link):
        if "://" not in link.href:
            link.target = LinkTarget.INTERNAL

    config = CreoleConfig(interwiki={"wikipedia": "https://en.wikipedia.org/wiki/"})
    html = render_creole("**Hello** [[wikipedia:Creole]]", config, link_hook=classify)
"""

from .config import CreoleConfig, ExportConfig, build_config, load_config, validate_config
from .exceptions import (
    ConfigError,
    CreoleExportError,
    DocumentFetchError,
    DocumentWriteError,
    ExportError,
    RenderFileError,
)
from .exporter import export_documents
from .filesystem import FileSystemSink
from .inline import render_fragment
from .models import ExportReport, LinkDescription, LinkHook, LinkTarget, SourceDocument
from .parser import render_creole, render_file
from .scanner import find_token
from .segmenter import segment_lines
from .sources import DirectoryDocumentSource, MongoDocumentSource

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "render_creole",
    "render_file",
    "render_fragment",
    "segment_lines",
    "find_token",
    # Export pipeline
    "export_documents",
    "FileSystemSink",
    "DirectoryDocumentSource",
    "MongoDocumentSource",
    # Configuration
    "CreoleConfig",
    "ExportConfig",
    "build_config",
    "load_config",
    "validate_config",
    # Data models
    "ExportReport",
    "LinkDescription",
    "LinkHook",
    "LinkTarget",
    "SourceDocument",
    # Exceptions
    "ConfigError",
    "CreoleExportError",
    "DocumentFetchError",
    "DocumentWriteError",
    "ExportError",
    "RenderFileError",
    # Version
    "__version__",
]
