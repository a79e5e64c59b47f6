from typing import Any, Dict, Iterable, List, Optional

from .dtos import CartLineItem, CartLineItemView, CartState
from .schema import CURRENT_SCHEMA_VERSION

_OPTIONAL_FIELDS = ("variant_id", "variant_options", "image_url", "seller_id")


class CartLineItemMapper:
    def to_document(self, item: CartLineItem) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "id": item.id,
            "product_id": item.product_id,
            "product_name": item.product_name,
            "quantity": item.quantity,
            "price_cents": item.price_cents,
        }
        for name in _OPTIONAL_FIELDS:
            value = getattr(item, name)
            if value is not None:
                doc[name] = dict(value) if name == "variant_options" else value
        return doc

    def from_document(self, doc: Dict[str, Any]) -> CartLineItem:
        options = doc.get("variant_options")
        return CartLineItem(
            id=doc["id"],
            product_id=doc["product_id"],
            product_name=doc["product_name"],
            quantity=doc["quantity"],
            price_cents=doc["price_cents"],
            variant_id=doc.get("variant_id"),
            variant_options=dict(options) if options is not None else None,
            image_url=doc.get("image_url"),
            seller_id=doc.get("seller_id"),
        )


class CartStateMapper:
    def __init__(self, line_item_mapper: Optional[CartLineItemMapper] = None) -> None:
        self.line_item_mapper = line_item_mapper or CartLineItemMapper()

    def to_document(self, state: CartState) -> Dict[str, Any]:
        return {
            "version": CURRENT_SCHEMA_VERSION,
            "revision": state.revision,
            "items": [self.line_item_mapper.to_document(i) for i in state.items],
        }

    def from_document(self, doc: Dict[str, Any]) -> CartState:
        return CartState(
            items=[self.line_item_mapper.from_document(i) for i in doc["items"]],
            revision=doc.get("revision", 0),
        )


class CartViewMapper:
    """Shapes line items the way the cart page and drawer render them."""

    def to_view(self, item: CartLineItem) -> CartLineItemView:
        variant_name = None
        if item.variant_options:
            variant_name = ", ".join(item.variant_options.values())
        return CartLineItemView(
            id=item.id,
            product_id=item.product_id,
            name=item.product_name,
            # product id doubles as slug until the catalog slug is denormalized too
            slug=item.product_id,
            image_url=item.image_url or "",
            price=item.price_cents,
            quantity=item.quantity,
            variant_id=item.variant_id,
            variant_name=variant_name,
        )

    def many_to_view(self, items: Iterable[CartLineItem]) -> List[CartLineItemView]:
        return [self.to_view(i) for i in items]
