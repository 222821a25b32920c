from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from jewelry_storefront.utils.date_utils import DateUtils


class OrderStatus(Enum):
    """Order status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class SalesChannel(Enum):
    B2C = "b2c"
    B2B = "b2b"


@dataclass
class OrderItem:
    """Represents an item within an order"""
    product_id: Optional[int]
    product_name: str
    unit_price_cents: int  # Price at time of order
    quantity: int
    sku: Optional[str] = None
    order_item_id: Optional[int] = None
    order_id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OrderItem":
        return cls(
            order_item_id=row.get("id"),
            order_id=row.get("order_id"),
            product_id=row.get("product_id"),
            product_name=row["product_name"],
            sku=row.get("sku"),
            unit_price_cents=int(row["unit_price_cents"]),
            quantity=int(row["quantity"]),
        )

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "unit_price_cents": self.unit_price_cents,
            "quantity": self.quantity,
            "line_total_cents": self.line_total_cents,
        }


@dataclass
class CustomerInfo:
    """Contact and shipping details collected on the checkout form"""
    name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    notes: Optional[str] = None

    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.city}, {self.state} {self.zip_code}"


@dataclass
class Order:
    id: Optional[int]
    order_number: str
    customer: CustomerInfo
    total_cents: int
    channel: str = SalesChannel.B2C.value
    status: str = OrderStatus.PENDING.value
    user_id: Optional[int] = None
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderItem] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any], items: Optional[List[OrderItem]] = None) -> "Order":
        return cls(
            id=int(row["id"]),
            order_number=row["order_number"],
            customer=CustomerInfo(
                name=row["customer_name"],
                email=row["email"],
                phone=row["phone"],
                address=row["address"],
                city=row["city"],
                state=row["state"],
                zip_code=row["zip_code"],
                notes=row.get("notes"),
            ),
            total_cents=int(row["total_cents"]),
            channel=row.get("channel") or SalesChannel.B2C.value,
            status=row.get("status") or OrderStatus.PENDING.value,
            user_id=row.get("user_id"),
            company_name=row.get("company_name"),
            created_at=DateUtils.coerce(row.get("created_at")),
            items=items or [],
        )

    @property
    def is_wholesale(self) -> bool:
        return self.channel == SalesChannel.B2B.value

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "customer_name": self.customer.name,
            "email": self.customer.email,
            "phone": self.customer.phone,
            "address": self.customer.full_address,
            "notes": self.customer.notes,
            "channel": self.channel,
            "company_name": self.company_name,
            "total_cents": self.total_cents,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "items": [item.to_dict() for item in self.items],
        }
