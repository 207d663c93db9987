"""Ingestion components: front-matter parsing and source loading."""

from postkb.pipeline.frontmatter import (
    MalformedMetadata,
    parse_date,
    parse_document,
    parse_metadata,
    serialize_document,
    serialize_metadata,
    split_front_matter,
)
from postkb.pipeline.loader import SourceText, discover_files, doc_id_from_path, read_sources

__all__ = [
    # Front-matter
    "MalformedMetadata",
    "parse_date",
    "parse_document",
    "parse_metadata",
    "serialize_document",
    "serialize_metadata",
    "split_front_matter",
    # Sources
    "SourceText",
    "discover_files",
    "doc_id_from_path",
    "read_sources",
]
