"""Category and date views over a snapshot."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timezone, tzinfo
from typing import Iterable

from postkb.domain.document import Document


class Catalog:
    """Read-only index over one snapshot of documents.

    Every view is ordered by ``published_at`` (descending unless asked
    otherwise) with ties broken by ``id`` ascending. Naive timestamps are
    taken to be in ``tz`` so they order alongside offset-aware ones.
    """

    def __init__(self, documents: Iterable[Document], tz: tzinfo | None = None, version: int = 0):
        self.tz = tz or timezone.utc
        self.version = version

        self._newest_first = sorted(documents, key=self._newest_first_key)
        self._by_id = {doc.id: doc for doc in self._newest_first}

        by_category: dict[str, list[str]] = defaultdict(list)
        by_day: dict[date, list[str]] = defaultdict(list)
        for doc in self._newest_first:
            for name in doc.categories:
                by_category[name].append(doc.id)
            by_day[doc.published_at.date()].append(doc.id)

        self._by_category = {name: tuple(ids) for name, ids in by_category.items()}
        self._by_day = {day: tuple(ids) for day, ids in by_day.items()}

    @classmethod
    def from_snapshot(cls, snapshot, tz: tzinfo | None = None) -> "Catalog":
        return cls(snapshot.documents.values(), tz=tz, version=snapshot.version)

    def _instant(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value

    def _newest_first_key(self, doc: Document):
        # Negated POSIX timestamp keeps the id tie-break ascending
        return (-self._instant(doc.published_at).timestamp(), doc.id)

    def _oldest_first_key(self, doc: Document):
        return (self._instant(doc.published_at).timestamp(), doc.id)

    def by_category(self, name: str, descending: bool = True) -> list[Document]:
        """Documents tagged ``name``, newest first. Unknown names give ``[]``."""
        documents = [self._by_id[doc_id] for doc_id in self._by_category.get(name, ())]
        if descending:
            return documents
        return sorted(documents, key=self._oldest_first_key)

    def by_date(self, descending: bool = True) -> list[Document]:
        """All documents ordered by publication date."""
        if descending:
            return list(self._newest_first)
        return sorted(self._newest_first, key=self._oldest_first_key)

    def on_date(self, day: date) -> list[Document]:
        """Documents whose publication date, as written, falls on ``day``."""
        if isinstance(day, datetime):
            day = day.date()
        return [self._by_id[doc_id] for doc_id in self._by_day.get(day, ())]

    def categories(self) -> list[str]:
        return sorted(self._by_category)

    def category_counts(self) -> dict[str, int]:
        return {name: len(self._by_category[name]) for name in self.categories()}

    def __len__(self) -> int:
        return len(self._newest_first)
