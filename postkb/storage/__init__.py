"""Snapshot storage for parsed posts."""

from postkb.storage.docstore import DocumentStore, LoadError, NotFoundError, Snapshot

__all__ = ["DocumentStore", "LoadError", "NotFoundError", "Snapshot"]
