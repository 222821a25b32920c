from datetime import datetime, timezone
from functools import wraps
from typing import Optional

from flask import abort, flash, g, jsonify, redirect, request, url_for

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import BaseAPIException
from jewelry_storefront.core.session import SessionCartStore
from jewelry_storefront.models.user import Role, SessionIdentity
from jewelry_storefront.services.cart_service import CartService


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def parse_int(
    v,
    default=None,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
    field_name: str = "value",
) -> Optional[int]:
    """Parse an integer with optional range validation."""
    if v is None or v == "":
        return default
    try:
        result = int(v)
    except (TypeError, ValueError):
        if default is not None:
            return default
        abort(400, f"Invalid {field_name}: must be a valid integer")
    if min_val is not None and result < min_val:
        abort(400, f"{field_name} must be at least {min_val}")
    if max_val is not None and result > max_val:
        abort(400, f"{field_name} cannot exceed {max_val}")
    return result


def parse_bool(v, default: bool = False) -> bool:
    """Parse a boolean value from a query string."""
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    return str(v).lower() in ("1", "true", "t", "yes", "y", "on")


def current_identity() -> SessionIdentity:
    """Identity resolved for this request by the app's before_request hook"""
    return getattr(g, "identity", None) or SessionIdentity.anonymous()


def cart_store() -> SessionCartStore:
    return SessionCartStore()


def cart_service() -> CartService:
    return get_service(CartService)


_LOGIN_ENDPOINTS = {
    Role.ADMIN.value: "auth.admin_login",
    Role.B2B.value: "auth.b2b_login",
}


def role_required(role: str):
    """
    Redirect to the role's login page unless the viewer holds ``role``.

    For b2b that means an approved reseller account.
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            identity = current_identity()
            allowed = identity.is_admin if role == Role.ADMIN.value else identity.is_b2b
            if not allowed:
                flash("Please sign in to continue.", "warning")
                return redirect(url_for(_LOGIN_ENDPOINTS[role], next=request.path))
            return view(*args, **kwargs)
        return wrapped
    return decorator


def flash_error(error: BaseAPIException) -> None:
    """User-facing alert for a failed action"""
    flash(error.message, "error")


def safe_next_url(default_endpoint: str) -> str:
    """Only follow same-site relative redirects"""
    target = request.args.get("next") or request.form.get("next")
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for(default_endpoint)
