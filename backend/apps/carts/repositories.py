from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from apps.common import get_logger
from .dtos import CartState
from .mappers import CartStateMapper
from .protocols import CacheBackendProtocol
from .schema import SchemaError, migrate_document
from .serializers import CartDocumentSerializer

DEFAULT_STORAGE_KEY = "cart-storage"

logger = get_logger(__name__).bind(component="carts", layer="repository")


class CartStorageError(Exception):
    """Raised when the cart document cannot be written to its storage slot."""


class DocumentCartStorage:
    """
    Base class for storages that keep the cart as one JSON document in a slot.

    Subclasses only move raw text in and out of the slot. Reading never
    raises: a missing, unreadable or invalid document is reported as ``None``
    so the store can start from an empty cart.
    """

    slot_name = "document"

    def __init__(self, state_mapper: Optional[CartStateMapper] = None) -> None:
        self.state_mapper = state_mapper or CartStateMapper()
        self.logger = logger.bind(storage=type(self).__name__, slot=self.slot_name)

    def _read_raw(self) -> Optional[str]:
        raise NotImplementedError

    def _write_raw(self, payload: str) -> None:
        raise NotImplementedError

    def serialize(self, state: CartState) -> str:
        return json.dumps(self.state_mapper.to_document(state), separators=(",", ":"))

    def deserialize(self, payload: str) -> Optional[CartState]:
        try:
            raw = json.loads(payload)
        except (TypeError, ValueError) as exc:
            self.logger.warning("Discarding unparsable cart document", error=str(exc))
            return None
        try:
            document = migrate_document(raw)
        except SchemaError as exc:
            self.logger.warning("Discarding cart document with unknown schema", error=str(exc))
            return None
        serializer = CartDocumentSerializer(data=document)
        if not serializer.is_valid():
            self.logger.warning(
                "Discarding invalid cart document", errors=dict(serializer.errors)
            )
            return None
        return self.state_mapper.from_document(serializer.validated_data)

    def load(self) -> Optional[CartState]:
        try:
            payload = self._read_raw()
        except CartStorageError as exc:
            self.logger.warning("Cart storage slot unreadable", error=str(exc))
            return None
        if payload is None:
            self.logger.debug("Cart storage slot empty")
            return None
        state = self.deserialize(payload)
        if state is not None:
            self.logger.debug(
                "Cart restored", items=len(state.items), revision=state.revision
            )
        return state

    def save(self, state: CartState) -> None:
        self._write_raw(self.serialize(state))
        self.logger.debug("Cart persisted", items=len(state.items), revision=state.revision)


class InMemoryCartStorage(DocumentCartStorage):
    slot_name = "memory"

    def __init__(self, payload: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.payload = payload

    def _read_raw(self) -> Optional[str]:
        return self.payload

    def _write_raw(self, payload: str) -> None:
        self.payload = payload


class CacheCartStorage(DocumentCartStorage):
    """Keeps the cart document under a fixed key of a Django cache backend."""

    def __init__(
        self,
        cache_backend: CacheBackendProtocol,
        key: str = DEFAULT_STORAGE_KEY,
        **kwargs,
    ) -> None:
        self.cache = cache_backend
        self.key = key
        self.slot_name = key
        super().__init__(**kwargs)

    def _read_raw(self) -> Optional[str]:
        try:
            payload = self.cache.get(self.key)
        except Exception as exc:
            raise CartStorageError(f"Cache read failed for {self.key}") from exc
        if payload is not None and not isinstance(payload, str):
            # Someone else wrote a non-text value under our key
            return json.dumps(payload) if isinstance(payload, (dict, list)) else str(payload)
        return payload

    def _write_raw(self, payload: str) -> None:
        try:
            self.cache.set(self.key, payload, timeout=None)
        except Exception as exc:
            raise CartStorageError(f"Cache write failed for {self.key}") from exc


class JsonFileCartStorage(DocumentCartStorage):
    """Keeps the cart document in a single JSON file, replaced atomically on save."""

    def __init__(self, path: Union[str, Path], **kwargs) -> None:
        self.path = Path(path)
        self.slot_name = str(self.path)
        super().__init__(**kwargs)

    def _read_raw(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise CartStorageError(f"Could not read {self.path}") from exc

    def _write_raw(self, payload: str) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise CartStorageError(f"Could not write {self.path}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
