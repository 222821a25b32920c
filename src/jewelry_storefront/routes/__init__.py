from .admin import admin_bp
from .api import api_bp
from .auth import auth_bp
from .b2b import b2b_bp
from .media import media_bp
from .reseller import reseller_bp
from .storefront import storefront_bp

__all__ = [
    "admin_bp",
    "api_bp",
    "auth_bp",
    "b2b_bp",
    "media_bp",
    "reseller_bp",
    "storefront_bp",
]
