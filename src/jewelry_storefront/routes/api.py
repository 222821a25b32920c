import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import BaseAPIException
from jewelry_storefront.schemas import (
    AddToCartRequest,
    ProductListRequest,
    UpdateCartLineRequest,
    parse_request,
)
from jewelry_storefront.services.product_service import ProductService
from jewelry_storefront.routes.utils import (
    cart_service,
    cart_store,
    current_identity,
    parse_bool,
    parse_int,
    success_response,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(BaseAPIException)
def handle_api_exception(error: BaseAPIException):
    if error.status_code >= 500:
        logger.error(f"API error: {error.internal_message}\n{error.traceback or ''}")
    else:
        logger.info(f"API request rejected ({error.status_code}): {error.internal_message}")
    return jsonify(error.to_dict()), error.status_code


@api_bp.errorhandler(HTTPException)
def handle_http_exception(error: HTTPException):
    return jsonify({
        "success": False,
        "error": {
            "code": (error.name or "HTTP_ERROR").upper().replace(" ", "_"),
            "message": str(error.description),
        },
    }), error.code


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


# Catalog

@api_bp.route("/products", methods=["GET"])
def list_products():
    """
    List products visible to the current viewer.

    Query parameters:
    - category: category id
    - q: case-insensitive search on name, description and category
    - in_stock: only products currently in stock
    """
    filters = parse_request(ProductListRequest, {
        "category_id": parse_int(request.args.get("category"), min_val=1, field_name="category"),
        "search": request.args.get("q"),
        "in_stock": parse_bool(request.args.get("in_stock")) or None,
    })
    wholesale = current_identity().is_b2b
    products = get_service(ProductService).list_products(filters)
    return success_response({
        "products": [product.to_dict(wholesale=wholesale) for product in products],
        "count": len(products),
    })


@api_bp.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id: int):
    product = get_service(ProductService).get_product(product_id)
    return success_response(product.to_dict(wholesale=current_identity().is_b2b))


@api_bp.route("/categories", methods=["GET"])
def list_categories():
    categories = get_service(ProductService).list_categories()
    return success_response([category.to_dict() for category in categories])


# Cart

@api_bp.route("/cart", methods=["GET"])
def get_cart():
    return success_response(cart_store().load().to_dict())


@api_bp.route("/cart/items", methods=["POST"])
def add_cart_item():
    store = cart_store()
    cart = store.load()
    add_request = parse_request(AddToCartRequest, _json_body())
    line = cart_service().add_item(cart, add_request, current_identity())
    store.save(cart)
    return success_response(cart.to_dict(), f"Added {line.name} to cart", 201)


@api_bp.route("/cart/items/<int:line_id>", methods=["PATCH"])
def update_cart_item(line_id: int):
    store = cart_store()
    cart = store.load()
    update_request = parse_request(UpdateCartLineRequest, _json_body())
    cart_service().update_item(cart, line_id, update_request, current_identity())
    store.save(cart)
    return success_response(cart.to_dict(), "Cart updated")


@api_bp.route("/cart/items/<int:line_id>", methods=["DELETE"])
def remove_cart_item(line_id: int):
    store = cart_store()
    cart = store.load()
    cart_service().remove_item(cart, line_id)
    store.save(cart)
    return success_response(cart.to_dict(), "Item removed")


@api_bp.route("/cart", methods=["DELETE"])
def clear_cart():
    store = cart_store()
    cart = store.load()
    cart_service().clear(cart)
    store.save(cart)
    return success_response(cart.to_dict(), "Cart cleared")
