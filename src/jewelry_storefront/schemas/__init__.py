from .auth_schemas import SignInRequest
from .cart_schemas import AddToCartRequest, UpdateCartLineRequest
from .checkout_schemas import CheckoutRequest
from .common_schemas import parse_request
from .product_schemas import (
    CategoryCreateRequest,
    ProductCreateRequest,
    ProductListRequest,
    ProductUpdateRequest,
)
from .reseller_schemas import ResellerApplicationRequest
from .session_schemas import CartLineSchema, CartSnapshotSchema

__all__ = [
    "parse_request",
    "SignInRequest",
    "AddToCartRequest",
    "UpdateCartLineRequest",
    "CheckoutRequest",
    "ProductListRequest",
    "ProductCreateRequest",
    "ProductUpdateRequest",
    "CategoryCreateRequest",
    "ResellerApplicationRequest",
    "CartLineSchema",
    "CartSnapshotSchema",
]
