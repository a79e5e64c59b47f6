from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class CartLineItem:
    id: str
    product_id: str
    product_name: str
    quantity: int
    price_cents: int
    variant_id: Optional[str] = None
    variant_options: Optional[Dict[str, str]] = None
    image_url: Optional[str] = None
    seller_id: Optional[str] = None


@dataclass
class CartState:
    items: List[CartLineItem] = field(default_factory=list)
    revision: int = 0


@dataclass
class CartSummaryDTO:
    subtotal_cents: int
    item_count: int
    line_count: int
    estimated_shipping_cents: int
    total_cents: int


@dataclass
class CartLineItemView:
    id: str
    product_id: str
    name: str
    slug: str
    image_url: str
    price: int
    quantity: int
    variant_id: Optional[str] = None
    variant_name: Optional[str] = None


"""DTO dataclasses only. Mapping logic lives in mappers.py."""
