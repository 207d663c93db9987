"""Document and metadata entities for the post archive."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

DEFAULT_LAYOUT = "post"

# Front-matter keys with typed fields; never valid as extras
RESERVED_KEYS = ("title", "date", "categories", "layout")


def _check_extras(extras: Mapping[str, str]) -> None:
    clashes = sorted(key for key in extras if key in RESERVED_KEYS)
    if clashes:
        raise ValueError(f"extras may not contain typed fields: {', '.join(clashes)}")


@dataclass(frozen=True, slots=True)
class Metadata:
    """Typed front-matter of a single post.

    Attributes:
        title: Display title
        published_at: Publication timestamp (naive or offset-aware)
        categories: Category tags, unordered
        layout: Name of the external rendering template
        extras: Any other front-matter keys, kept as opaque strings
    """

    title: str
    published_at: datetime
    categories: frozenset[str] = frozenset()
    layout: str = DEFAULT_LAYOUT
    extras: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        _check_extras(self.extras)
        object.__setattr__(self, "categories", frozenset(self.categories))
        object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))


@dataclass(frozen=True, slots=True)
class Document:
    """Immutable post entity.

    Created once per ingestion pass and never mutated afterwards.

    Attributes:
        id: Unique document identifier (e.g., "2024-01-25-python-perf")
        title: Display title
        published_at: Publication timestamp
        categories: Category tags, possibly empty
        layout: Rendering template name, opaque to the archive
        body: Raw formatted text after the front-matter (may be empty)
        extras: Unrecognised front-matter keys
        source_path: Where the text was read from (optional)
        checksum: SHA-1 of the raw source text
    """

    id: str
    title: str
    published_at: datetime
    categories: frozenset[str] = frozenset()
    layout: str = DEFAULT_LAYOUT
    body: str = ""
    extras: Mapping[str, str] = field(default_factory=dict, hash=False)
    source_path: str | None = None
    checksum: str = ""

    def __post_init__(self):
        if self.body is None:
            raise ValueError(f"Document {self.id!r} body must not be None")
        _check_extras(self.extras)
        object.__setattr__(self, "categories", frozenset(self.categories))
        object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))

    @classmethod
    def from_metadata(
        cls,
        doc_id: str,
        metadata: Metadata,
        body: str,
        source_path: str | None = None,
        checksum: str = "",
    ) -> "Document":
        return cls(
            id=doc_id,
            title=metadata.title,
            published_at=metadata.published_at,
            categories=metadata.categories,
            layout=metadata.layout,
            body=body,
            extras=metadata.extras,
            source_path=source_path,
            checksum=checksum,
        )

    @property
    def metadata(self) -> Metadata:
        return Metadata(
            title=self.title,
            published_at=self.published_at,
            categories=self.categories,
            layout=self.layout,
            extras=self.extras,
        )

    def to_dict(self) -> dict:
        """Convert document to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "published_at": self.published_at.isoformat(),
            "categories": sorted(self.categories),
            "layout": self.layout,
            "body": self.body,
            "extras": dict(self.extras),
            "source_path": self.source_path,
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """Create document from a dictionary produced by ``to_dict``.

        Args:
            data: Dictionary with document fields

        Returns:
            Document instance
        """
        return cls(
            id=data["id"],
            title=data["title"],
            published_at=datetime.fromisoformat(data["published_at"]),
            categories=frozenset(data.get("categories", [])),
            layout=data.get("layout", DEFAULT_LAYOUT),
            body=data.get("body", ""),
            extras=data.get("extras", {}),
            source_path=data.get("source_path"),
            checksum=data.get("checksum", ""),
        )
