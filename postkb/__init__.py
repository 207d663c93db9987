"""Post archive: front-matter parsing, snapshot store and catalog."""

__version__ = "0.1.0"

# Domain entities
from postkb.domain.document import Document, Metadata

# Ingestion
from postkb.pipeline.frontmatter import MalformedMetadata, parse_document, serialize_document
from postkb.pipeline.loader import SourceText, read_sources

# Storage and retrieval
from postkb.storage.docstore import DocumentStore, LoadError, NotFoundError, Snapshot
from postkb.retrieval.catalog import Catalog

# Configuration
from postkb.config import AppConfig, load_config

__all__ = [
    # Domain
    "Document",
    "Metadata",
    # Ingestion
    "MalformedMetadata",
    "parse_document",
    "serialize_document",
    "SourceText",
    "read_sources",
    # Storage
    "DocumentStore",
    "LoadError",
    "NotFoundError",
    "Snapshot",
    "Catalog",
    # Config
    "AppConfig",
    "load_config",
]
