from __future__ import annotations

import hashlib
import re


_slug_re = re.compile(r"[^a-z0-9\s-]")
_space_re = re.compile(r"[\s_]+")


def slugify(text: str) -> str:
    normalized = text.strip().lower()
    normalized = _slug_re.sub("", normalized)
    normalized = _space_re.sub("-", normalized)
    normalized = normalized.strip("-")
    return normalized or "post"


def sha1_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def fingerprint(pairs: list[tuple[str, str]]) -> str:
    """Stable digest over ``(doc_id, checksum)`` pairs, independent of order."""
    payload = "\n".join(f"{doc_id}:{checksum}" for doc_id, checksum in sorted(pairs))
    return sha1_text(payload)
