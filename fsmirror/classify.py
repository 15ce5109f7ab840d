"""Decide from metadata alone whether a catalog entry is a file to download."""

from __future__ import annotations

from enum import Enum

from .models import CatalogEntry


class EntryKind(Enum):
    DOWNLOADABLE = "downloadable"
    SKIP = "skip"


def has_extension(name: str) -> bool:
    """True when the last path segment has a ``.`` with something after it.

    ``"file.yaml"`` and ``".gitignore"`` have one; ``"folder"`` and
    ``"notes."`` do not.
    """
    base = name.rsplit("/", 1)[-1]
    _, dot, suffix = base.rpartition(".")
    return bool(dot) and bool(suffix)


def classify_entry(entry: CatalogEntry) -> EntryKind:
    """Folders and placeholders have no extension and are skipped."""
    if has_extension(entry.name):
        return EntryKind.DOWNLOADABLE
    return EntryKind.SKIP
