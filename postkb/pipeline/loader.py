"""Read post files from the configured content roots."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

from postkb.config import ContentConfig, resolve_path
from postkb.utils import slugify

logger = logging.getLogger(__name__)


class SourceText(NamedTuple):
    """Raw text of one post plus the identifier it will be stored under."""

    doc_id: str
    text: str
    path: str | None = None


def doc_id_from_path(path: str | Path) -> str:
    """Derive a stable identifier from a file name.

    The Jekyll date prefix is kept, e.g. ``2024-01-25-Python Perf.md`` becomes
    ``2024-01-25-python-perf``.
    """
    return slugify(Path(path).stem)


def discover_files(config: ContentConfig, base: Path | None = None) -> list[Path]:
    """List post files under every content root, sorted by path.

    Raises:
        FileNotFoundError: If a content root does not exist
    """
    extensions = {ext.lower() for ext in config.file_extensions}
    files: list[Path] = []
    for root in config.content_roots:
        root_path = resolve_path(root, base)
        if not root_path.is_dir():
            raise FileNotFoundError(f"Content root not found: {root_path}")

        matched = [
            path for path in root_path.rglob("*")
            if path.is_file() and path.suffix.lower() in extensions
        ]
        logger.debug(f"Found {len(matched)} files under {root_path}")
        files.extend(matched)

    return sorted(files)


def read_sources(config: ContentConfig, base: Path | None = None) -> list[SourceText]:
    """Read every discovered post file into a ``SourceText``."""
    sources = [
        SourceText(
            doc_id=doc_id_from_path(path),
            text=path.read_text(encoding=config.encoding),
            path=str(path),
        )
        for path in discover_files(config, base)
    ]
    logger.info(f"Read {len(sources)} source files from {len(config.content_roots)} content roots")
    return sources
