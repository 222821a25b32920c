"""
WhatsApp click-to-chat hand-off.

The prefilled chat is the order transport: the seller receives the
summary and follows up for payment. Nothing confirms delivery.
"""

import re
from typing import Optional
from urllib.parse import quote

from jewelry_storefront.utils.formatting_utils import FormattingUtils

WHATSAPP_BASE_URL = "https://wa.me"


def _money(amount_cents: int, currency: str) -> str:
    return FormattingUtils.format_money(amount_cents, currency, thousands_separator=False)


def build_order_message(order, currency: str = "USD", invoice_url: Optional[str] = None) -> str:
    """
    Plain-text summary of an Order using WhatsApp's *bold* markup.

    ``invoice_url`` points the seller at the printable invoice; without it
    the message says the invoice follows separately.
    """
    customer = order.customer
    parts = ["🛍️ *NEW JEWELRY ORDER*", f"🧾 *Order:* {order.order_number}", ""]
    parts.append(f"👤 *Customer:* {customer.name}")
    parts.append(f"📧 *Email:* {customer.email}")
    parts.append(f"📱 *Phone:* {customer.phone}")
    parts.append(f"🏠 *Address:* {customer.full_address}")
    parts.append("")

    if order.is_wholesale:
        parts.append(f"🏢 *B2B Customer:* {order.company_name or 'Wholesale account'}")
        parts.append("")

    parts.append("📦 *Items Ordered:*")
    for item in order.items:
        parts.append(
            f"• {item.product_name} - Qty: {item.quantity} - "
            f"{_money(item.unit_price_cents, currency)} each"
        )
    parts.append("")
    parts.append(f"💰 *Total Amount: {_money(order.total_cents, currency)}*")
    parts.append("")

    if customer.notes:
        parts.append(f"📝 *Notes:* {customer.notes}")
        parts.append("")

    if invoice_url:
        parts.append(f"📄 *Invoice:* {invoice_url}")
    else:
        parts.append("📄 *Detailed invoice will be shared separately*")
    return "\n".join(parts)


def build_whatsapp_url(phone_number: str, message: str) -> str:
    """https://wa.me/<digits>?text=<percent-encoded message>"""
    digits = re.sub(r"\D", "", phone_number or "")
    if not digits:
        raise ValueError("Seller WhatsApp number must contain digits")
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"
