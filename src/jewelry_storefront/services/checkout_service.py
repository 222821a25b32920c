import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from jewelry_storefront.core.config import StoreConfig
from jewelry_storefront.core.exceptions import BusinessLogicError
from jewelry_storefront.models.cart import Cart
from jewelry_storefront.models.order import (
    CustomerInfo,
    Order,
    OrderItem,
    OrderStatus,
    SalesChannel,
)
from jewelry_storefront.models.user import SessionIdentity
from jewelry_storefront.repositories.order_repository import OrderRepository
from jewelry_storefront.schemas.checkout_schemas import CheckoutRequest
from jewelry_storefront.utils.date_utils import DateUtils
from jewelry_storefront.utils.whatsapp import build_order_message, build_whatsapp_url

logger = logging.getLogger(__name__)

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class CheckoutResult:
    order: Order
    whatsapp_url: str
    message: str


class CheckoutService:
    """
    Turns the session cart into a recorded order and a WhatsApp hand-off.

    There is no payment step and no idempotency key: submitting twice
    records two orders.
    """

    def __init__(self, order_repository: OrderRepository, store_config: StoreConfig):
        self.order_repo = order_repository
        self.store = store_config

    def checkout(self, cart: Cart, request: CheckoutRequest, identity: SessionIdentity) -> CheckoutResult:
        if cart.is_empty:
            raise BusinessLogicError("Your cart is empty", rule="empty_cart")

        customer = CustomerInfo(
            name=request.name,
            email=str(request.email),
            phone=request.phone,
            address=request.address,
            city=request.city,
            state=request.state,
            zip_code=request.zip_code,
            notes=request.notes,
        )
        wholesale = identity.is_b2b
        draft = Order(
            id=None,
            order_number=self.generate_order_number(),
            customer=customer,
            total_cents=cart.total_cents,
            channel=SalesChannel.B2B.value if wholesale else SalesChannel.B2C.value,
            status=OrderStatus.PENDING.value,
            user_id=identity.user_id,
            company_name=identity.company_name if wholesale else None,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    product_name=line.name,
                    sku=line.sku,
                    unit_price_cents=line.unit_price_cents,
                    quantity=line.quantity,
                )
                for line in cart.lines
            ],
        )

        order = self.order_repo.create_order(draft)

        message, whatsapp_url = self.handoff(order)

        cart.clear()
        logger.info(
            f"Checkout recorded order {order.order_number} ({order.channel}, {order.total_cents}c) "
            f"for user {identity.user_id}"
        )
        return CheckoutResult(order=order, whatsapp_url=whatsapp_url, message=message)

    def handoff(self, order: Order, invoice_url: Optional[str] = None) -> Tuple[str, str]:
        """The WhatsApp message for an order and the click-to-chat URL carrying it"""
        message = build_order_message(order, currency=self.store.currency, invoice_url=invoice_url)
        return message, build_whatsapp_url(self.store.seller_whatsapp, message)

    def invoice_context(self, order: Order) -> Dict[str, Any]:
        """Template variables for the printable invoice"""
        return {
            "store_name": self.store.name,
            "contact_email": self.store.contact_email,
            "currency": self.store.currency,
            "order": order,
            "order_date": DateUtils.format_date(order.created_at, self.store.timezone),
            "customer_type": (
                f"B2B Wholesale ({order.company_name})" if order.is_wholesale and order.company_name
                else "B2B Wholesale" if order.is_wholesale
                else "B2C Retail"
            ),
        }

    @staticmethod
    def generate_order_number() -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
        suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
        return f"ORD-{stamp}-{suffix}"
