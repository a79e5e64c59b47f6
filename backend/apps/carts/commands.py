from dataclasses import dataclass
from typing import Any, Dict, Optional

from .dtos import CartLineItem

DEFAULT_VARIANT_SEGMENT = "default"


def make_line_item_id(product_id: str, variant_id: Optional[str] = None) -> str:
    """Line item key for a product/variant pair; variants of one product never collide."""
    return f"{product_id}-{variant_id or DEFAULT_VARIANT_SEGMENT}"


def _first(raw: Dict[str, Any], *keys: str):
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _as_int(value, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (ValueError, TypeError):
        return default


def _as_optional_str(value) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class AddItemCommand:
    item: CartLineItem

    @staticmethod
    def from_raw(raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            return None
        product_id = _as_optional_str(_first(raw, "product_id", "productId"))
        if product_id is None:
            # nested product object fallback
            product = raw.get("product")
            if isinstance(product, dict):
                product_id = _as_optional_str(product.get("id"))
        if product_id is None:
            return None
        variant_id = _as_optional_str(_first(raw, "variant_id", "variantId"))
        line_id = _as_optional_str(raw.get("id")) or make_line_item_id(
            product_id, variant_id
        )
        options = _first(raw, "variant_options", "variantOptions")
        if isinstance(options, dict) and options:
            options = {str(k): str(v) for k, v in options.items()}
        else:
            options = None
        item = CartLineItem(
            id=line_id,
            product_id=product_id,
            product_name=str(_first(raw, "product_name", "productName") or ""),
            quantity=_as_int(raw.get("quantity"), 1),
            price_cents=_as_int(_first(raw, "price_cents", "priceCents"), 0),
            variant_id=variant_id,
            variant_options=options,
            image_url=_as_optional_str(_first(raw, "image_url", "imageUrl")),
            seller_id=_as_optional_str(_first(raw, "seller_id", "sellerId")),
        )
        return AddItemCommand(item=item)


@dataclass
class UpdateQuantityCommand:
    item_id: str
    quantity: int

    @staticmethod
    def from_raw(raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            return None
        item_id = _as_optional_str(_first(raw, "item_id", "itemId", "id"))
        if item_id is None:
            return None
        # An unreadable quantity removes the line, like an explicit zero.
        return UpdateQuantityCommand(
            item_id=item_id, quantity=_as_int(raw.get("quantity"), 0)
        )
