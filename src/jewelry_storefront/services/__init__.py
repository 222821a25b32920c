from .auth_service import AuthService
from .cart_service import CartService
from .checkout_service import CheckoutResult, CheckoutService
from .dashboard_service import DashboardService
from .order_service import OrderService
from .product_service import ProductService
from .reseller_service import ResellerService
from .storage_service import StorageBuckets, StorageService

__all__ = [
    "AuthService",
    "CartService",
    "CheckoutService",
    "CheckoutResult",
    "DashboardService",
    "OrderService",
    "ProductService",
    "ResellerService",
    "StorageService",
    "StorageBuckets",
]
