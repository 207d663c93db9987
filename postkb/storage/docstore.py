"""In-memory document store with atomically swapped snapshots."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Union

from postkb.domain.document import Document
from postkb.pipeline.frontmatter import MalformedMetadata, parse_document
from postkb.pipeline.loader import SourceText
from postkb.retrieval.catalog import Catalog
from postkb.utils import fingerprint, sha1_text

logger = logging.getLogger(__name__)

Source = Union[SourceText, tuple]


class LoadError(Exception):
    """Raised when one or more documents of a batch fail to parse."""

    def __init__(self, failures: list[MalformedMetadata]):
        self.failures = list(failures)
        lines = "\n".join(f"  - {failure}" for failure in self.failures)
        super().__init__(f"{len(self.failures)} document(s) failed to load:\n{lines}")

    @property
    def doc_ids(self) -> list[str]:
        return [failure.doc_id for failure in self.failures]


class NotFoundError(LookupError):
    """Raised when a document id is absent from the current snapshot."""

    def __init__(self, doc_id: str):
        self.doc_id = doc_id
        super().__init__(f"Document not found: {doc_id}")


@dataclass(frozen=True)
class Snapshot:
    """Complete, immutable set of documents from one successful load."""

    version: int
    documents: Mapping[str, Document] = field(default_factory=dict)
    fingerprint: str = ""
    loaded_at: datetime | None = None

    def __post_init__(self):
        object.__setattr__(self, "documents", MappingProxyType(dict(self.documents)))

    def __len__(self) -> int:
        return len(self.documents)


def _coerce(source: Source) -> SourceText:
    if isinstance(source, SourceText):
        return source
    return SourceText(*source)


def build_documents(sources: Iterable[Source]) -> dict[str, Document]:
    """Parse every source, collecting all failures before raising.

    Raises:
        LoadError: If any source is malformed or ids are blank or repeated
    """
    documents: dict[str, Document] = {}
    failures: list[MalformedMetadata] = []
    seen: set[str] = set()

    for source in map(_coerce, sources):
        doc_id = source.doc_id
        if not doc_id or not doc_id.strip():
            failures.append(MalformedMetadata("id", "empty identifier", doc_id=source.path or repr(doc_id)))
            continue
        if doc_id in seen:
            failures.append(MalformedMetadata("id", "duplicate identifier", doc_id=doc_id))
            continue
        seen.add(doc_id)

        try:
            metadata, body = parse_document(source.text, doc_id=doc_id)
        except MalformedMetadata as exc:
            failures.append(exc)
            continue

        documents[doc_id] = Document.from_metadata(
            doc_id,
            metadata,
            body,
            source_path=source.path,
            checksum=sha1_text(source.text),
        )

    if failures:
        raise LoadError(failures)

    return documents


class DocumentStore:
    """Holds the current snapshot of parsed documents.

    Readers take no locks: they read ``self._snapshot`` once and work on that
    immutable value. ``load`` builds a new snapshot off to the side and swaps
    it in under a writer lock, so readers see either the old or the new
    snapshot, never a mix.
    """

    def __init__(self, tz: tzinfo | None = None):
        """Initialize an empty store.

        Args:
            tz: Timezone the catalog assumes for naive publication dates
        """
        self._snapshot = Snapshot(version=0)
        self._write_lock = threading.Lock()
        self._tz = tz
        self._catalog: Catalog | None = None

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        return self._snapshot.version

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self._snapshot.documents

    def load(self, sources: Iterable[Source]) -> Snapshot:
        """Replace the snapshot with the parsed ``sources``.

        Args:
            sources: ``SourceText`` records or ``(doc_id, text)`` pairs

        Returns:
            The new snapshot

        Raises:
            LoadError: If any document fails; the previous snapshot stays current
        """
        try:
            documents = build_documents(sources)
        except LoadError as exc:
            logger.warning(
                f"Load rejected, keeping snapshot v{self._snapshot.version}: "
                f"{len(exc.failures)} failure(s)"
            )
            raise

        digest = fingerprint([(doc.id, doc.checksum) for doc in documents.values()])
        with self._write_lock:
            snapshot = Snapshot(
                version=self._snapshot.version + 1,
                documents=documents,
                fingerprint=digest,
                loaded_at=datetime.now(timezone.utc),
            )
            self._snapshot = snapshot

        logger.info(f"Loaded {len(snapshot)} documents (snapshot v{snapshot.version})")
        return snapshot

    def get(self, doc_id: str) -> Document:
        """Return a document from the current snapshot.

        Raises:
            NotFoundError: If ``doc_id`` is unknown
        """
        try:
            return self._snapshot.documents[doc_id]
        except KeyError:
            raise NotFoundError(doc_id) from None

    def all(self) -> Iterator[Document]:
        """Iterate over the documents of the snapshot current at call time."""
        snapshot = self._snapshot
        return iter(snapshot.documents.values())

    def catalog(self) -> Catalog:
        """Catalog for the current snapshot, built once per snapshot version."""
        snapshot = self._snapshot
        cached = self._catalog
        if cached is not None and cached.version == snapshot.version:
            return cached

        catalog = Catalog.from_snapshot(snapshot, tz=self._tz)
        self._catalog = catalog
        logger.debug(f"Built catalog for snapshot v{snapshot.version}: {len(catalog.categories())} categories")
        return catalog
