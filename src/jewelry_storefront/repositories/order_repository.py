import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text

from jewelry_storefront.core.exceptions import NotFoundError
from jewelry_storefront.models.order import Order, OrderItem, OrderStatus
from jewelry_storefront.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_ORDER_COLUMNS = """
    id, order_number, user_id, customer_name, email, phone, address, city, state,
    zip_code, notes, channel, company_name, total_cents, status, created_at
"""


class OrderRepository(BaseRepository[Order]):

    @property
    def table_name(self) -> str:
        return "orders"

    def get_by_id(self, order_id: int) -> Order:
        row = self.execute_single_query(
            f"SELECT {_ORDER_COLUMNS} FROM orders WHERE id = :id", {"id": order_id}
        )
        if not row:
            raise NotFoundError("Order", str(order_id))
        return Order.from_row(row, self._items_for([row["id"]]).get(row["id"], []))

    def get_by_number(self, order_number: str) -> Order:
        row = self.execute_single_query(
            f"SELECT {_ORDER_COLUMNS} FROM orders WHERE order_number = :order_number",
            {"order_number": order_number},
        )
        if not row:
            raise NotFoundError("Order", order_number)
        return Order.from_row(row, self._items_for([row["id"]]).get(row["id"], []))

    def create_order(self, order: Order) -> Order:
        """Insert the order header and its items in one transaction"""
        created_at = datetime.now(timezone.utc)
        with self.transaction("CREATE_ORDER") as conn:
            order_id = conn.execute(
                text(
                    """
                    INSERT INTO orders (
                        order_number, user_id, customer_name, email, phone, address, city,
                        state, zip_code, notes, channel, company_name, total_cents, status,
                        created_at
                    )
                    VALUES (
                        :order_number, :user_id, :customer_name, :email, :phone, :address, :city,
                        :state, :zip_code, :notes, :channel, :company_name, :total_cents, :status,
                        :created_at
                    )
                    RETURNING id
                    """
                ),
                {
                    "order_number": order.order_number,
                    "user_id": order.user_id,
                    "customer_name": order.customer.name,
                    "email": order.customer.email,
                    "phone": order.customer.phone,
                    "address": order.customer.address,
                    "city": order.customer.city,
                    "state": order.customer.state,
                    "zip_code": order.customer.zip_code,
                    "notes": order.customer.notes,
                    "channel": order.channel,
                    "company_name": order.company_name,
                    "total_cents": order.total_cents,
                    "status": order.status,
                    "created_at": created_at,
                },
            ).scalar()

            for item in order.items:
                conn.execute(
                    text(
                        """
                        INSERT INTO order_items (
                            order_id, product_id, product_name, sku, unit_price_cents,
                            quantity, line_total_cents
                        )
                        VALUES (
                            :order_id, :product_id, :product_name, :sku, :unit_price_cents,
                            :quantity, :line_total_cents
                        )
                        """
                    ),
                    {
                        "order_id": order_id,
                        "product_id": item.product_id,
                        "product_name": item.product_name,
                        "sku": item.sku,
                        "unit_price_cents": item.unit_price_cents,
                        "quantity": item.quantity,
                        "line_total_cents": item.line_total_cents,
                    },
                )

        logger.info(f"Recorded order {order.order_number} (id={order_id}) with {len(order.items)} items")
        return self.get_by_id(order_id)

    def list_orders(self, user_id: Optional[int] = None, status: Optional[str] = None) -> List[Order]:
        sql = f"SELECT {_ORDER_COLUMNS} FROM orders WHERE 1=1"
        params: Dict[str, Any] = {}
        if user_id is not None:
            sql += " AND user_id = :user_id"
            params["user_id"] = user_id
        if status is not None:
            sql += " AND status = :status"
            params["status"] = status
        sql += " ORDER BY created_at DESC, id DESC"

        rows = self.execute_query(sql, params)
        items = self._items_for([row["id"] for row in rows])
        return [Order.from_row(row, items.get(row["id"], [])) for row in rows]

    def update_status(self, order_id: int, status: str) -> Order:
        affected = self.execute_command(
            "UPDATE orders SET status = :status WHERE id = :id", {"status": status, "id": order_id}
        )
        if affected == 0:
            raise NotFoundError("Order", str(order_id))
        return self.get_by_id(order_id)

    def revenue_cents(self) -> int:
        """Sum of totals over orders that were not cancelled"""
        return int(
            self.execute_scalar(
                "SELECT COALESCE(SUM(total_cents), 0) FROM orders WHERE status != :cancelled",
                {"cancelled": OrderStatus.CANCELLED.value},
            ) or 0
        )

    def _items_for(self, order_ids: List[int]) -> Dict[int, List[OrderItem]]:
        if not order_ids:
            return {}
        placeholders = ", ".join(f":id{i}" for i in range(len(order_ids)))
        rows = self.execute_query(
            f"""
            SELECT id, order_id, product_id, product_name, sku, unit_price_cents, quantity
            FROM order_items
            WHERE order_id IN ({placeholders})
            ORDER BY id
            """,
            {f"id{i}": order_id for i, order_id in enumerate(order_ids)},
        )
        grouped: Dict[int, List[OrderItem]] = defaultdict(list)
        for row in rows:
            grouped[row["order_id"]].append(OrderItem.from_row(row))
        return grouped
