from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from jewelry_storefront.utils.formatting_utils import FormattingUtils


@dataclass
class CartLine:
    """
    One product + quantity pair in a visitor's cart.

    The line id is the product id: a product appears at most once.
    unit_price_cents is frozen when the line is first inserted and is
    reset only when the other channel takes the line over.
    """
    product_id: int
    name: str
    unit_price_cents: int
    quantity: int
    is_wholesale: bool = False
    sku: Optional[str] = None
    image_url: Optional[str] = None
    description: str = ""
    category_name: Optional[str] = None

    @property
    def line_id(self) -> int:
        return self.product_id

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "name": self.name,
            "sku": self.sku,
            "image_url": self.image_url,
            "category_name": self.category_name,
            "unit_price_cents": self.unit_price_cents,
            "quantity": self.quantity,
            "is_wholesale": self.is_wholesale,
            "subtotal_cents": self.subtotal_cents,
        }


@dataclass
class Cart:
    """Session-scoped shopping cart"""
    lines: List[CartLine] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        """Number of distinct lines"""
        return len(self.lines)

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_cents(self) -> int:
        return sum(line.subtotal_cents for line in self.lines)

    @property
    def total_dollars(self) -> Decimal:
        return FormattingUtils.to_dollars(self.total_cents)

    @property
    def is_empty(self) -> bool:
        return len(self.lines) == 0

    def total(self) -> int:
        return self.total_cents

    def get_line(self, line_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.line_id == line_id), None)

    def add_line(self, line: CartLine) -> None:
        self.lines.append(line)

    def remove_line(self, line_id: int) -> bool:
        original_length = len(self.lines)
        self.lines = [line for line in self.lines if line.line_id != line_id]
        return len(self.lines) < original_length

    def clear(self) -> None:
        self.lines.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_items": self.total_items,
            "total_quantity": self.total_quantity,
            "total_cents": self.total_cents,
            "total_dollars": str(self.total_dollars),
            "is_empty": self.is_empty,
            "lines": [line.to_dict() for line in self.lines],
        }
