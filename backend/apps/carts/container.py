from __future__ import annotations

from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import caches
from django.core.exceptions import ImproperlyConfigured

from .protocols import CartStorageProtocol
from .repositories import (
    DEFAULT_STORAGE_KEY,
    CacheCartStorage,
    InMemoryCartStorage,
    JsonFileCartStorage,
)
from .services import CartStore


def _storage_config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if config is not None:
        return dict(config)
    return dict(getattr(settings, "CART_STORAGE", {}) or {})


def build_cart_storage(config: Optional[Dict[str, Any]] = None) -> CartStorageProtocol:
    cfg = _storage_config(config)
    backend = (cfg.get("BACKEND") or "cache").lower()
    if backend == "cache":
        return CacheCartStorage(
            caches[cfg.get("CACHE_ALIAS", "default")],
            key=cfg.get("KEY") or DEFAULT_STORAGE_KEY,
        )
    if backend == "file":
        path = cfg.get("FILE_PATH")
        if not path:
            raise ImproperlyConfigured("CART_STORAGE['FILE_PATH'] is required for the file backend.")
        return JsonFileCartStorage(path)
    if backend == "memory":
        return InMemoryCartStorage()
    raise ImproperlyConfigured(
        f"Unknown CART_STORAGE backend '{backend}'. Use 'cache', 'file' or 'memory'."
    )


def build_cart_store(
    storage: Optional[CartStorageProtocol] = None,
    config: Optional[Dict[str, Any]] = None,
) -> CartStore:
    cfg = _storage_config(config)
    return CartStore(
        storage=storage if storage is not None else build_cart_storage(cfg),
        fail_open=cfg.get("FAIL_OPEN", True),
    )
