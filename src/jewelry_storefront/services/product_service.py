import logging
from typing import List, Optional

from jewelry_storefront.core.exceptions import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
)
from jewelry_storefront.models.product import Category, Product
from jewelry_storefront.models.user import SessionIdentity
from jewelry_storefront.repositories.category_repository import CategoryRepository
from jewelry_storefront.repositories.product_repository import ProductRepository
from jewelry_storefront.schemas.product_schemas import (
    CategoryCreateRequest,
    ProductCreateRequest,
    ProductListRequest,
    ProductUpdateRequest,
)
from jewelry_storefront.utils.formatting_utils import FormattingUtils

logger = logging.getLogger(__name__)


class ProductService:
    """
    Catalog reads for every viewer and the admin-only writes.

    Responsibilities:
    - Pick the price a viewer sees
    - Guard admin writes by role
    - Keep category deletes from orphaning products
    """

    def __init__(self, product_repository: ProductRepository, category_repository: CategoryRepository):
        self.product_repo = product_repository
        self.category_repo = category_repository

    # ------------------------------------------------------------------ #
    # Reads                                                               #
    # ------------------------------------------------------------------ #
    def get_product(self, product_id: int) -> Product:
        return self.product_repo.get_by_id(product_id)

    def list_products(self, request: Optional[ProductListRequest] = None) -> List[Product]:
        request = request or ProductListRequest()
        products = self.product_repo.list_products(
            category_id=request.category_id,
            in_stock=request.in_stock,
            search=request.search,
        )
        logger.info(f"Listed {len(products)} products (category={request.category_id}, search={request.search!r})")
        return products

    def get_category(self, category_id: int) -> Category:
        return self.category_repo.get_by_id(category_id)

    def list_categories(self) -> List[Category]:
        return self.category_repo.list_categories()

    @staticmethod
    def display_price_cents(product: Product, identity: SessionIdentity) -> int:
        """Wholesale price for approved resellers, retail price for everyone else"""
        return product.price_for(identity.is_b2b)

    @staticmethod
    def minimum_quantity(product: Product, identity: SessionIdentity) -> int:
        return product.min_quantity_for(identity.is_b2b)

    # ------------------------------------------------------------------ #
    # Admin writes                                                        #
    # ------------------------------------------------------------------ #
    def create_product(self, identity: SessionIdentity, request: ProductCreateRequest) -> Product:
        self._require_admin(identity)
        self._check_category(request.category_id)

        product = self.product_repo.create_product(self._product_values(request))
        logger.info(f"Admin {identity.user_id} created product {product.id} ({product.name})")
        return product

    def update_product(self, identity: SessionIdentity, product_id: int, request: ProductUpdateRequest) -> Product:
        self._require_admin(identity)
        self._check_category(request.category_id)

        product = self.product_repo.update_product(product_id, self._product_values(request))
        logger.info(f"Admin {identity.user_id} updated product {product_id}")
        return product

    def delete_product(self, identity: SessionIdentity, product_id: int) -> None:
        self._require_admin(identity)
        if not self.product_repo.delete_product(product_id):
            raise NotFoundError("Product", str(product_id))
        logger.info(f"Admin {identity.user_id} deleted product {product_id}")

    def create_category(self, identity: SessionIdentity, request: CategoryCreateRequest) -> Category:
        self._require_admin(identity)
        if self.category_repo.get_by_name(request.name) is not None:
            raise ConflictError(f"Category \"{request.name}\" already exists", "name")

        category = self.category_repo.create_category(
            name=request.name, description=request.description, image_url=request.image_url
        )
        logger.info(f"Admin {identity.user_id} created category {category.id} ({category.name})")
        return category

    def delete_category(self, identity: SessionIdentity, category_id: int) -> None:
        self._require_admin(identity)
        in_use = self.product_repo.count_in_category(category_id)
        if in_use:
            raise ConflictError(
                f"Cannot delete a category that still has {in_use} product(s)", "category_id"
            )
        try:
            deleted = self.category_repo.delete_category(category_id)
        except DatabaseError as e:
            # Products added between the count and the delete trip the foreign key
            logger.error(f"Category {category_id} delete failed: {e.internal_message}")
            raise
        if not deleted:
            raise NotFoundError("Category", str(category_id))
        logger.info(f"Admin {identity.user_id} deleted category {category_id}")

    # Private helpers
    def _require_admin(self, identity: SessionIdentity) -> None:
        if not identity.is_admin:
            logger.warning(f"Non-admin user {identity.user_id} attempted a catalog write")
            raise ForbiddenError("Only administrators can change the catalog")

    def _check_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and not self.category_repo.exists(category_id):
            raise NotFoundError("Category", str(category_id))

    @staticmethod
    def _product_values(request: ProductCreateRequest) -> dict:
        return {
            "name": request.name,
            "description": request.description,
            "category_id": request.category_id,
            "b2c_price_cents": FormattingUtils.to_cents(request.b2c_price),
            "b2b_price_cents": FormattingUtils.to_cents(request.b2b_price),
            "min_quantity_b2b": request.min_quantity_b2b,
            "in_stock": request.in_stock,
            "image_url": request.image_url,
            "sku": request.sku,
            "material": request.material,
        }
