import logging
from typing import List, Optional

from jewelry_storefront.core.exceptions import ForbiddenError, ValidationError
from jewelry_storefront.models.order import Order, OrderStatus
from jewelry_storefront.models.user import SessionIdentity
from jewelry_storefront.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class OrderService:
    """Order lookups and the admin status update; no workflow drives status"""

    def __init__(self, order_repository: OrderRepository):
        self.order_repo = order_repository

    def get_by_number(self, order_number: str) -> Order:
        return self.order_repo.get_by_number(order_number)

    def list_orders(self, identity: SessionIdentity, status: Optional[str] = None) -> List[Order]:
        if not identity.is_admin:
            raise ForbiddenError("Only administrators can list all orders")
        if status and status not in OrderStatus.values():
            raise ValidationError(f"Unknown order status: {status}")
        return self.order_repo.list_orders(status=status)

    def update_status(self, identity: SessionIdentity, order_id: int, status: str) -> Order:
        if not identity.is_admin:
            raise ForbiddenError("Only administrators can change order status")
        if status not in OrderStatus.values():
            raise ValidationError(f"Unknown order status: {status}")
        order = self.order_repo.update_status(order_id, status)
        logger.info(f"Admin {identity.user_id} set order {order.order_number} to {status}")
        return order

    def can_view(self, identity: SessionIdentity, order: Order, placed_in_session: List[str]) -> bool:
        """Admins, the owning account, or the browser session that placed it"""
        if identity.is_admin:
            return True
        if order.user_id is not None and order.user_id == identity.user_id:
            return True
        return order.order_number in placed_in_session
