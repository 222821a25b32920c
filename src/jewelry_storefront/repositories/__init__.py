from .application_repository import ApplicationRepository
from .base import BaseRepository
from .category_repository import CategoryRepository
from .order_repository import OrderRepository
from .product_repository import ProductRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "CategoryRepository",
    "UserRepository",
    "OrderRepository",
    "ApplicationRepository",
]
