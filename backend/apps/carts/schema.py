"""
Versioning of the persisted cart document.

Every document written by this project carries a ``version`` tag. Older
shapes found in the storage slot are upgraded one step at a time by the
functions registered in ``MIGRATIONS`` until they reach
``CURRENT_SCHEMA_VERSION``. Version 0 is the envelope the browser cart store
used to write: ``{"state": {"items": [...]}, "version": 0}``.
"""
from __future__ import annotations

from typing import Any, Callable, Dict

CURRENT_SCHEMA_VERSION = 1

Document = Dict[str, Any]


class SchemaError(Exception):
    """Raised when a stored document cannot be brought to the current version."""


def _v0_to_v1(document: Document) -> Document:
    state = document.get("state")
    if not isinstance(state, dict):
        raise SchemaError("Version 0 document has no state object")
    items = state.get("items", [])
    if not isinstance(items, list):
        raise SchemaError("Version 0 document items must be a list")
    return {"version": 1, "revision": 0, "items": list(items)}


MIGRATIONS: Dict[int, Callable[[Document], Document]] = {
    0: _v0_to_v1,
}


def detect_version(raw: Any) -> int:
    if isinstance(raw, list):
        return 0
    if not isinstance(raw, dict):
        raise SchemaError(f"Unsupported document type: {type(raw).__name__}")
    version = raw.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise SchemaError(f"Invalid document version: {version!r}")
    return version


def migrate_document(raw: Any) -> Document:
    """Return ``raw`` upgraded to ``CURRENT_SCHEMA_VERSION``."""
    version = detect_version(raw)
    if version > CURRENT_SCHEMA_VERSION:
        raise SchemaError(
            f"Document version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}"
        )
    document: Document = (
        {"version": 0, "state": {"items": raw}} if isinstance(raw, list) else dict(raw)
    )
    while version < CURRENT_SCHEMA_VERSION:
        migration = MIGRATIONS.get(version)
        if migration is None:
            raise SchemaError(f"No migration registered for version {version}")
        document = migration(document)
        next_version = document.get("version")
        if not isinstance(next_version, int) or next_version <= version:
            raise SchemaError(f"Migration from version {version} did not advance")
        version = next_version
    return document
