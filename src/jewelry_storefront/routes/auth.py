import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import BaseAPIException
from jewelry_storefront.core.session import clear_session_user, set_session_user_id
from jewelry_storefront.models.user import Role
from jewelry_storefront.schemas import SignInRequest, parse_request
from jewelry_storefront.services.auth_service import AuthService
from jewelry_storefront.routes.utils import current_identity, flash_error, safe_next_url

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _sign_in(role: str, template: str, default_endpoint: str):
    if request.method == "GET":
        return render_template(template, email="", next=request.args.get("next", ""))

    try:
        credentials = parse_request(SignInRequest, request.form)
        identity = get_service(AuthService).sign_in(credentials.email, credentials.password, role)
    except BaseAPIException as e:
        flash_error(e)
        return render_template(
            template, email=request.form.get("email", ""), next=request.form.get("next", "")
        ), e.status_code

    set_session_user_id(identity.user_id)
    flash(f"Welcome back, {identity.profile.display_name}!", "success")
    return redirect(safe_next_url(default_endpoint))


@auth_bp.route("/b2b-login", methods=["GET", "POST"])
def b2b_login():
    if current_identity().is_b2b and request.method == "GET":
        return redirect(url_for("b2b.dashboard"))
    return _sign_in(Role.B2B.value, "b2b_login.html", "b2b.dashboard")


@auth_bp.route("/admin-login", methods=["GET", "POST"])
def admin_login():
    if current_identity().is_admin and request.method == "GET":
        return redirect(url_for("admin.dashboard"))
    return _sign_in(Role.ADMIN.value, "admin_login.html", "admin.dashboard")


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Ends the signed-in session; the cart stays with the browser"""
    identity = current_identity()
    clear_session_user()
    if identity.is_authenticated:
        logger.info(f"User {identity.user_id} signed out")
    flash("You have been signed out.", "info")
    return redirect(url_for("storefront.home"))
