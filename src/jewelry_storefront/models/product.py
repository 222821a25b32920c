from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from jewelry_storefront.utils.date_utils import DateUtils
from jewelry_storefront.utils.formatting_utils import FormattingUtils


@dataclass
class Category:
    """A product grouping such as Rings or Necklaces"""
    id: int
    name: str
    description: str = ""
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    product_count: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Category":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            description=row.get("description") or "",
            image_url=row.get("image_url"),
            created_at=DateUtils.coerce(row.get("created_at")),
            product_count=int(row.get("product_count") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "product_count": self.product_count,
        }


@dataclass
class Product:
    """
    A catalog item.

    Both prices are stored in cents. Which one a viewer pays is decided by
    ``price_for`` at the moment the product is shown or added to a cart.
    """
    id: int
    name: str
    description: str
    b2c_price_cents: int
    b2b_price_cents: int
    min_quantity_b2b: int = 1
    in_stock: bool = True
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    image_url: Optional[str] = None
    sku: Optional[str] = None
    material: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            description=row.get("description") or "",
            b2c_price_cents=int(row["b2c_price_cents"]),
            b2b_price_cents=int(row["b2b_price_cents"]),
            min_quantity_b2b=int(row.get("min_quantity_b2b") or 1),
            in_stock=bool(row.get("in_stock")),
            category_id=row.get("category_id"),
            category_name=row.get("category_name"),
            image_url=row.get("image_url"),
            sku=row.get("sku"),
            material=row.get("material"),
            created_at=DateUtils.coerce(row.get("created_at")),
        )

    def price_for(self, wholesale: bool) -> int:
        """Unit price in cents for a retail or an approved wholesale viewer"""
        return self.b2b_price_cents if wholesale else self.b2c_price_cents

    def min_quantity_for(self, wholesale: bool) -> int:
        return self.min_quantity_b2b if wholesale else 1

    @property
    def b2c_price_dollars(self) -> Decimal:
        return FormattingUtils.to_dollars(self.b2c_price_cents)

    @property
    def b2b_price_dollars(self) -> Decimal:
        return FormattingUtils.to_dollars(self.b2b_price_cents)

    def to_dict(self, wholesale: Optional[bool] = None) -> Dict[str, Any]:
        """
        Serialize for the JSON API.

        When ``wholesale`` is given the viewer-specific price and minimum are
        included; the wholesale price itself is only exposed to wholesale
        viewers.
        """
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "image_url": self.image_url,
            "sku": self.sku,
            "material": self.material,
            "in_stock": self.in_stock,
            "b2c_price_cents": self.b2c_price_cents,
        }
        if wholesale is None:
            data["b2b_price_cents"] = self.b2b_price_cents
            data["min_quantity_b2b"] = self.min_quantity_b2b
        else:
            data["price_cents"] = self.price_for(wholesale)
            data["min_quantity"] = self.min_quantity_for(wholesale)
            if wholesale:
                data["b2b_price_cents"] = self.b2b_price_cents
                data["min_quantity_b2b"] = self.min_quantity_b2b
        return data
