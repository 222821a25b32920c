import logging

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import BaseAPIException, NotFoundError
from jewelry_storefront.core.session import placed_order_numbers, remember_order
from jewelry_storefront.schemas import (
    AddToCartRequest,
    CheckoutRequest,
    ProductListRequest,
    UpdateCartLineRequest,
    parse_request,
)
from jewelry_storefront.services.checkout_service import CheckoutService
from jewelry_storefront.services.order_service import OrderService
from jewelry_storefront.services.product_service import ProductService
from jewelry_storefront.routes.utils import (
    cart_service,
    cart_store,
    current_identity,
    flash_error,
    safe_next_url,
)

logger = logging.getLogger(__name__)

storefront_bp = Blueprint("storefront", __name__)

FEATURED_PRODUCT_COUNT = 6


@storefront_bp.route("/", methods=["GET"])
def home():
    products = get_service(ProductService).list_products(ProductListRequest(in_stock=True))
    return render_template("home.html", featured=products[:FEATURED_PRODUCT_COUNT])


@storefront_bp.route("/products", methods=["GET"])
def products():
    service = get_service(ProductService)
    try:
        filters = parse_request(
            ProductListRequest,
            {"category_id": request.args.get("category"), "search": request.args.get("q")},
        )
    except BaseAPIException as e:
        flash_error(e)
        filters = ProductListRequest()

    return render_template(
        "products.html",
        products=service.list_products(filters),
        categories=service.list_categories(),
        selected_category=filters.category_id,
        search=filters.search or "",
    )


@storefront_bp.route("/cart/items", methods=["POST"])
def add_to_cart():
    identity = current_identity()
    store = cart_store()
    cart = store.load()
    try:
        add_request = parse_request(AddToCartRequest, request.form)
        line = cart_service().add_item(cart, add_request, identity)
    except BaseAPIException as e:
        flash_error(e)
    else:
        store.save(cart)
        flash(f"Added {line.name} to your cart.", "success")
    return redirect(safe_next_url("storefront.products"))


@storefront_bp.route("/cart", methods=["GET"])
def cart():
    return render_template("cart.html", cart=cart_store().load())


@storefront_bp.route("/cart/items/<int:line_id>", methods=["POST"])
def update_cart_line(line_id: int):
    store = cart_store()
    cart = store.load()
    try:
        update_request = parse_request(UpdateCartLineRequest, request.form)
        cart_service().update_item(cart, line_id, update_request, current_identity())
    except BaseAPIException as e:
        flash_error(e)
    else:
        store.save(cart)
    return redirect(url_for("storefront.cart"))


@storefront_bp.route("/cart/items/<int:line_id>/remove", methods=["POST"])
def remove_cart_line(line_id: int):
    store = cart_store()
    cart = store.load()
    try:
        cart_service().remove_item(cart, line_id)
    except BaseAPIException as e:
        flash_error(e)
    else:
        store.save(cart)
    return redirect(url_for("storefront.cart"))


@storefront_bp.route("/cart/clear", methods=["POST"])
def clear_cart():
    store = cart_store()
    cart = store.load()
    cart_service().clear(cart)
    store.save(cart)
    flash("Your cart has been cleared.", "info")
    return redirect(url_for("storefront.cart"))


@storefront_bp.route("/checkout", methods=["GET", "POST"])
def checkout():
    store = cart_store()
    cart = store.load()
    if cart.is_empty:
        return redirect(url_for("storefront.cart"))

    identity = current_identity()
    form = request.form.to_dict() if request.method == "POST" else _prefill(identity)

    if request.method == "POST":
        try:
            checkout_request = parse_request(CheckoutRequest, request.form)
            result = get_service(CheckoutService).checkout(cart, checkout_request, identity)
        except BaseAPIException as e:
            logger.warning(f"Checkout failed: {e.internal_message}")
            flash_error(e)
        else:
            store.save(cart)
            remember_order(result.order.order_number)
            return redirect(url_for("storefront.order_success", order_number=result.order.order_number))

    return render_template("checkout.html", cart=cart, form=form)


@storefront_bp.route("/order-success/<order_number>", methods=["GET"])
def order_success(order_number: str):
    order = _viewable_order(order_number)
    invoice_url = url_for("storefront.invoice", order_number=order.order_number, _external=True)
    message, whatsapp_url = get_service(CheckoutService).handoff(order, invoice_url)
    return render_template("order_success.html", order=order, whatsapp_url=whatsapp_url, message=message)


@storefront_bp.route("/orders/<order_number>/invoice", methods=["GET"])
def invoice(order_number: str):
    order = _viewable_order(order_number)
    return render_template("invoice.html", **get_service(CheckoutService).invoice_context(order))


def _viewable_order(order_number: str):
    try:
        order = get_service(OrderService).get_by_number(order_number)
    except NotFoundError:
        abort(404, f"Order {order_number} not found.")
    if not get_service(OrderService).can_view(current_identity(), order, placed_order_numbers()):
        abort(404, f"Order {order_number} not found.")
    return order


def _prefill(identity) -> dict:
    if not identity.is_authenticated:
        return {}
    profile = identity.profile
    return {
        "name": profile.full_name or "",
        "email": profile.email,
        "phone": profile.phone or "",
    }
