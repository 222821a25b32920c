import logging
from dataclasses import dataclass
from typing import List

from jewelry_storefront.core.exceptions import ForbiddenError
from jewelry_storefront.models.application import ApplicationStatus
from jewelry_storefront.models.order import Order
from jewelry_storefront.models.user import SessionIdentity
from jewelry_storefront.repositories.application_repository import ApplicationRepository
from jewelry_storefront.repositories.category_repository import CategoryRepository
from jewelry_storefront.repositories.order_repository import OrderRepository
from jewelry_storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


@dataclass
class AdminOverview:
    product_count: int
    category_count: int
    pending_applications: int
    order_count: int
    revenue_cents: int


@dataclass
class B2BSummary:
    orders: List[Order]
    order_count: int
    total_order_value_cents: int
    total_items_purchased: int


class DashboardService:
    """Aggregates shown on the admin and reseller dashboards"""

    def __init__(
        self,
        product_repository: ProductRepository,
        category_repository: CategoryRepository,
        order_repository: OrderRepository,
        application_repository: ApplicationRepository,
    ):
        self.product_repo = product_repository
        self.category_repo = category_repository
        self.order_repo = order_repository
        self.application_repo = application_repository

    def admin_overview(self, identity: SessionIdentity) -> AdminOverview:
        if not identity.is_admin:
            raise ForbiddenError("Admin access required")
        return AdminOverview(
            product_count=self.product_repo.count(),
            category_count=self.category_repo.count(),
            pending_applications=self.application_repo.count_by_status(ApplicationStatus.PENDING.value),
            order_count=self.order_repo.count(),
            revenue_cents=self.order_repo.revenue_cents(),
        )

    def b2b_summary(self, identity: SessionIdentity) -> B2BSummary:
        if not identity.is_b2b:
            raise ForbiddenError("Approved reseller access required")
        orders = self.order_repo.list_orders(user_id=identity.user_id)
        return B2BSummary(
            orders=orders,
            order_count=len(orders),
            total_order_value_cents=sum(order.total_cents for order in orders),
            total_items_purchased=sum(order.total_quantity for order in orders),
        )
