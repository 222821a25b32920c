from .application import ApplicationStatus, ResellerApplication
from .cart import Cart, CartLine
from .order import CustomerInfo, Order, OrderItem, OrderStatus, SalesChannel
from .product import Category, Product
from .user import Role, SessionIdentity, UserProfile

__all__ = [
    "Product", "Category",
    "Cart", "CartLine",
    "UserProfile", "SessionIdentity", "Role",
    "Order", "OrderItem", "CustomerInfo", "OrderStatus", "SalesChannel",
    "ResellerApplication", "ApplicationStatus",
]
