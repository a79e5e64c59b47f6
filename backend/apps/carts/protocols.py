from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from .dtos import CartState


class CartStorageProtocol(Protocol):
    def load(self) -> Optional[CartState]:
        ...

    def save(self, state: CartState) -> None:
        ...


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        ...


CartListener = Callable[[CartState], None]
