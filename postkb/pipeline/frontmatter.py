"""
Front-matter parser for posts.

A post opens with a YAML header fenced by ``---`` lines, followed by the body:

---
layout: post
title: "Python Perf"
date: 2024-01-25 10:00:00 +0800
categories: python performance
---
Body text...

The header is read without implicit typing so every scalar stays a string;
``title``, ``date``, ``categories`` and ``layout`` are then typed here, and
any other key is kept verbatim in ``Metadata.extras``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, time
from typing import Optional, Tuple

import yaml

from postkb.domain.document import DEFAULT_LAYOUT, RESERVED_KEYS, Metadata

logger = logging.getLogger(__name__)

HEADER_FIELD = "front-matter"
KNOWN_FIELDS = RESERVED_KEYS

_header_re = re.compile(
    r"\A---[ \t]*\r?\n(?P<header>.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S.%f %z",
)


class MalformedMetadata(ValueError):
    """Raised when a document's front-matter is missing or invalid."""

    def __init__(self, field: str, reason: str, doc_id: Optional[str] = None):
        self.field = field
        self.reason = reason
        self.doc_id = doc_id
        super().__init__(self._message())

    def _message(self) -> str:
        prefix = f"{self.doc_id}: " if self.doc_id else ""
        return f"{prefix}{self.field} ({self.reason})"

    def with_doc_id(self, doc_id: str) -> "MalformedMetadata":
        return MalformedMetadata(self.field, self.reason, doc_id=doc_id)


def split_front_matter(text: str, doc_id: Optional[str] = None) -> Tuple[str, str]:
    """Split raw text into header text and body.

    Raises:
        MalformedMetadata: If the opening or closing delimiter is missing
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    if not re.match(r"---[ \t]*\r?\n", text):
        raise MalformedMetadata(HEADER_FIELD, "missing opening '---' delimiter", doc_id)

    match = _header_re.match(text)
    if not match:
        raise MalformedMetadata(HEADER_FIELD, "missing closing '---' delimiter", doc_id)

    return match.group("header"), text[match.end():]


def parse_date(value: str) -> datetime:
    """Parse a front-matter date.

    Accepts ``YYYY-MM-DD``, ISO-8601 date-times and the Jekyll form
    ``YYYY-MM-DD HH:MM:SS +HHMM``.

    Raises:
        ValueError: If ``value`` is not a recognised calendar date
    """
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    raise ValueError(f"unrecognised date '{value}'")


def format_date(value: datetime) -> str:
    """Inverse of ``parse_date``; a naive midnight is written as a bare date."""
    if value.tzinfo is None and value.time() == time(0, 0):
        return value.date().isoformat()
    return value.isoformat(sep=" ")


def _load_header(header: str, doc_id: Optional[str]) -> dict:
    try:
        data = yaml.load(header, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise MalformedMetadata(HEADER_FIELD, f"invalid YAML: {exc}", doc_id) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedMetadata(HEADER_FIELD, "header must be a mapping", doc_id)
    for key in data:
        if not isinstance(key, str):
            raise MalformedMetadata(HEADER_FIELD, f"non-string key {key!r}", doc_id)
    return data


def _required_string(data: dict, key: str, doc_id: Optional[str]) -> str:
    if key not in data:
        raise MalformedMetadata(key, "missing required field", doc_id)
    value = data[key]
    if not isinstance(value, str):
        raise MalformedMetadata(key, "expected a string", doc_id)
    if not value.strip():
        raise MalformedMetadata(key, "empty value", doc_id)
    return value


def _parse_categories(value, doc_id: Optional[str]) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset(value.split())
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return frozenset(token for item in value for token in item.split())
    raise MalformedMetadata("categories", "expected a whitespace-separated string or a list", doc_id)


def _opaque(value) -> str:
    if isinstance(value, str):
        return value
    return yaml.safe_dump(value, default_flow_style=True, width=float("inf")).strip()


def parse_metadata(header: str, doc_id: Optional[str] = None) -> Metadata:
    """Type the fields of a front-matter header (without its delimiters)."""
    data = _load_header(header, doc_id)

    title = _required_string(data, "title", doc_id)

    raw_date = _required_string(data, "date", doc_id)
    try:
        published_at = parse_date(raw_date)
    except ValueError as exc:
        raise MalformedMetadata("date", str(exc), doc_id) from exc

    categories = _parse_categories(data.get("categories", ""), doc_id)

    layout = data.get("layout", DEFAULT_LAYOUT)
    if not isinstance(layout, str):
        raise MalformedMetadata("layout", "expected a string", doc_id)

    extras = {key: _opaque(value) for key, value in data.items() if key not in KNOWN_FIELDS}

    return Metadata(
        title=title,
        published_at=published_at,
        categories=categories,
        layout=layout,
        extras=extras,
    )


def parse_document(text: str, doc_id: Optional[str] = None) -> Tuple[Metadata, str]:
    """Parse front-matter and return it with the remaining body.

    Args:
        text: Raw document text
        doc_id: Identifier used in error messages

    Returns:
        Tuple of (metadata, body)

    Raises:
        MalformedMetadata: If the header is missing, unparsable or lacks a
            required field

    Example:
        >>> meta, body = parse_document("---\\ntitle: Hi\\ndate: 2024-01-25\\n---\\nText\\n")
        >>> meta.title, body
        ('Hi', 'Text\\n')
    """
    header, body = split_front_matter(text, doc_id)
    metadata = parse_metadata(header, doc_id)
    logger.debug(f"Parsed front-matter for {doc_id or '<anonymous>'}: {len(metadata.extras)} extra keys")
    return metadata, body


def serialize_metadata(metadata: Metadata) -> str:
    """Render metadata as a fenced front-matter header."""
    fields = {
        "layout": metadata.layout,
        "title": metadata.title,
        "date": format_date(metadata.published_at),
        "categories": " ".join(sorted(metadata.categories)),
    }
    fields.update(metadata.extras)
    header = yaml.safe_dump(fields, sort_keys=False, allow_unicode=True, width=float("inf"))
    return f"---\n{header}---\n"


def serialize_document(metadata: Metadata, body: str = "") -> str:
    return serialize_metadata(metadata) + body
