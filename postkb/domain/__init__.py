"""Domain entities for the post archive.

Immutable data structures for posts and their front-matter.
"""

from postkb.domain.document import DEFAULT_LAYOUT, Document, Metadata

__all__ = ["DEFAULT_LAYOUT", "Document", "Metadata"]
