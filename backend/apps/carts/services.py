from __future__ import annotations

from collections import OrderedDict
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from apps.common import get_logger
from .dtos import CartLineItem, CartState, CartSummaryDTO
from .protocols import CartListener, CartStorageProtocol
from .repositories import CartStorageError

logger = get_logger(__name__).bind(component="carts", layer="store")


def _copy_item(item: CartLineItem, **changes) -> CartLineItem:
    copied = replace(item, **changes)
    if copied.variant_options is not None:
        copied.variant_options = dict(copied.variant_options)
    return copied


class CartStore:
    """
    Local cart of the current shopper.

    Line items are keyed by ``id`` and kept in insertion order. Every mutation
    bumps ``revision``, writes the whole cart to ``storage`` and then notifies
    subscribers. The store is built once per application and shared.
    """

    def __init__(self, storage: CartStorageProtocol, *, fail_open: bool = True):
        self.storage = storage
        self.fail_open = fail_open
        self.logger = logger.bind(service="CartStore")
        self._items: "OrderedDict[str, CartLineItem]" = OrderedDict()
        self._revision = 0
        self._listeners: List[CartListener] = []
        restored = self.storage.load()
        if restored is not None:
            self._replace_state(restored)
            self.logger.info(
                "Cart rehydrated", lines=len(self._items), revision=self._revision
            )
        else:
            self.logger.debug("Starting with an empty cart")

    # -- mutators ---------------------------------------------------------

    def add_item(self, item: CartLineItem) -> None:
        existing = self._items.get(item.id)
        if existing is not None:
            # first write wins for every field except quantity
            self._items[item.id] = _copy_item(
                existing, quantity=existing.quantity + item.quantity
            )
            self.logger.debug(
                "Merged line item",
                item_id=item.id,
                added=item.quantity,
                quantity=self._items[item.id].quantity,
            )
        else:
            self._items[item.id] = _copy_item(item)
            self.logger.debug("Added line item", item_id=item.id, quantity=item.quantity)
        self._commit("add_item")

    def remove_item(self, item_id: str) -> None:
        removed = self._items.pop(item_id, None)
        if removed is not None:
            self.logger.debug("Removed line item", item_id=item_id)
        self._commit("remove_item")

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(item_id)
            return
        existing = self._items.get(item_id)
        if existing is not None:
            self._items[item_id] = _copy_item(existing, quantity=quantity)
            self.logger.debug("Updated quantity", item_id=item_id, quantity=quantity)
        self._commit("update_quantity")

    def clear_cart(self) -> None:
        self._items.clear()
        self.logger.info("Cart cleared")
        self._commit("clear_cart")

    # -- derived values ---------------------------------------------------

    def subtotal(self) -> int:
        return sum(i.price_cents * i.quantity for i in self._items.values())

    def item_count(self) -> int:
        return sum(i.quantity for i in self._items.values())

    def line_count(self) -> int:
        return len(self._items)

    def summary(self, estimated_shipping_cents: int = 0) -> CartSummaryDTO:
        subtotal = self.subtotal()
        return CartSummaryDTO(
            subtotal_cents=subtotal,
            item_count=self.item_count(),
            line_count=self.line_count(),
            estimated_shipping_cents=estimated_shipping_cents,
            total_cents=subtotal + estimated_shipping_cents,
        )

    # -- read access ------------------------------------------------------

    @property
    def revision(self) -> int:
        return self._revision

    def items(self) -> List[CartLineItem]:
        """Copies of the line items in insertion order."""
        return [_copy_item(i) for i in self._items.values()]

    def get_item(self, item_id: str) -> Optional[CartLineItem]:
        item = self._items.get(item_id)
        return _copy_item(item) if item is not None else None

    def snapshot(self) -> CartState:
        return CartState(items=self.items(), revision=self._revision)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    # -- change propagation -----------------------------------------------

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register ``listener`` for change notifications; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh(self) -> bool:
        """
        Adopt the stored cart if another process wrote a newer revision.

        Returns True when the in-memory cart was replaced.
        """
        stored = self.storage.load()
        if stored is None or stored.revision <= self._revision:
            return False
        self.logger.info(
            "Adopting newer cart from storage",
            local_revision=self._revision,
            stored_revision=stored.revision,
        )
        self._replace_state(stored)
        self._notify()
        return True

    # -- internals --------------------------------------------------------

    def _replace_state(self, state: CartState) -> None:
        items: Dict[str, CartLineItem] = OrderedDict()
        for item in state.items:
            items[item.id] = _copy_item(item)
        self._items = items
        self._revision = state.revision

    def _commit(self, operation: str) -> None:
        self._revision += 1
        try:
            self.storage.save(self.snapshot())
        except CartStorageError:
            self.logger.exception(
                "Failed to persist cart", operation=operation, revision=self._revision
            )
            if not self.fail_open:
                raise
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                # listener errors never reach the mutating caller
                self.logger.exception(
                    "Cart listener failed", listener=repr(listener), revision=state.revision
                )
