"""
Client-side state kept in the signed Flask session cookie: the signed-in
user id, the cart snapshot and the form token.
"""

import hmac
import logging
import secrets
from typing import Optional

from flask import request, session
from marshmallow import ValidationError as MarshmallowValidationError

from jewelry_storefront.models.cart import Cart
from jewelry_storefront.schemas.session_schemas import CartSnapshotSchema

logger = logging.getLogger(__name__)

CART_KEY = "cart"
USER_KEY = "user_id"
ORDERS_KEY = "placed_orders"
CSRF_KEY = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

_cart_schema = CartSnapshotSchema()


class SessionCartStore:
    """Loads and saves the cart snapshot for the current request's session"""

    def load(self) -> Cart:
        raw = session.get(CART_KEY)
        if not raw:
            return Cart()
        try:
            return _cart_schema.load(raw)
        except MarshmallowValidationError as err:
            logger.warning(f"Discarding malformed cart snapshot: {err.messages}")
            session.pop(CART_KEY, None)
            return Cart()

    def save(self, cart: Cart) -> None:
        if cart.is_empty:
            session.pop(CART_KEY, None)
        else:
            session[CART_KEY] = _cart_schema.dump(cart)
        session.modified = True


def get_session_user_id() -> Optional[int]:
    user_id = session.get(USER_KEY)
    return int(user_id) if user_id is not None else None


def set_session_user_id(user_id: int) -> None:
    session[USER_KEY] = user_id


def clear_session_user() -> None:
    session.pop(USER_KEY, None)


def remember_order(order_number: str) -> None:
    """Orders placed from this browser may view their invoice without signing in"""
    placed = list(session.get(ORDERS_KEY, []))
    if order_number not in placed:
        placed.append(order_number)
    # Keep the cookie small
    session[ORDERS_KEY] = placed[-20:]


def placed_order_numbers() -> list:
    return list(session.get(ORDERS_KEY, []))


def generate_csrf_token() -> str:
    """Per-session token every state-changing request must echo back"""
    if CSRF_KEY not in session:
        session[CSRF_KEY] = secrets.token_hex(16)
    return session[CSRF_KEY]


def csrf_token_is_valid() -> bool:
    """Forms post the token as a field; API clients send it as a header"""
    expected = session.get(CSRF_KEY)
    submitted = request.form.get(CSRF_KEY) or request.headers.get(CSRF_HEADER)
    if not expected or not submitted:
        return False
    return hmac.compare_digest(expected, submitted)
