import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from jewelry_storefront.core.exceptions import NotFoundError
from jewelry_storefront.models.product import Product
from jewelry_storefront.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_PRODUCT_SELECT = """
    SELECT
        p.id,
        p.name,
        p.description,
        p.category_id,
        c.name AS category_name,
        p.b2c_price_cents,
        p.b2b_price_cents,
        p.min_quantity_b2b,
        p.in_stock,
        p.image_url,
        p.sku,
        p.material,
        p.created_at
    FROM products p
    LEFT JOIN categories c ON c.id = p.category_id
"""


class ProductRepository(BaseRepository[Product]):
    """Catalog reads and the admin-only product writes"""

    UPDATABLE_COLUMNS = (
        "name",
        "description",
        "category_id",
        "b2c_price_cents",
        "b2b_price_cents",
        "min_quantity_b2b",
        "in_stock",
        "image_url",
        "sku",
        "material",
    )

    @property
    def table_name(self) -> str:
        return "products"

    def get_by_id(self, product_id: int) -> Product:
        row = self.execute_single_query(_PRODUCT_SELECT + " WHERE p.id = :id", {"id": product_id})
        if not row:
            raise NotFoundError("Product", str(product_id))
        return Product.from_row(row)

    def list_products(
        self,
        category_id: Optional[int] = None,
        in_stock: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        """
        Newest first. ``search`` matches name, description or category name,
        case-insensitively.
        """
        sql = _PRODUCT_SELECT + " WHERE 1=1"
        params: Dict[str, Any] = {}

        if category_id is not None:
            sql += " AND p.category_id = :category_id"
            params["category_id"] = category_id
        if in_stock is not None:
            sql += " AND p.in_stock = :in_stock"
            params["in_stock"] = in_stock
        if search:
            sql += (
                " AND (LOWER(p.name) LIKE :q OR LOWER(p.description) LIKE :q"
                " OR LOWER(COALESCE(c.name, '')) LIKE :q)"
            )
            params["q"] = f"%{search.lower()}%"

        sql += " ORDER BY p.created_at DESC, p.id DESC"

        rows = self.execute_query(sql, params)
        return [Product.from_row(row) for row in rows]

    def create_product(self, values: Dict[str, Any]) -> Product:
        params = {column: values.get(column) for column in self.UPDATABLE_COLUMNS}
        params["created_at"] = datetime.now(timezone.utc)

        product_id = self.execute_insert_returning_id(
            """
            INSERT INTO products (
                name, description, category_id, b2c_price_cents, b2b_price_cents,
                min_quantity_b2b, in_stock, image_url, sku, material, created_at
            )
            VALUES (
                :name, :description, :category_id, :b2c_price_cents, :b2b_price_cents,
                :min_quantity_b2b, :in_stock, :image_url, :sku, :material, :created_at
            )
            """,
            params,
        )
        logger.info(f"Inserted product {product_id}")
        return self.get_by_id(product_id)

    def update_product(self, product_id: int, updates: Dict[str, Any]) -> Product:
        updates = {k: v for k, v in updates.items() if k in self.UPDATABLE_COLUMNS}
        if updates:
            assignments = ", ".join(f"{column} = :{column}" for column in updates)
            affected = self.execute_command(
                f"UPDATE products SET {assignments} WHERE id = :id",
                {**updates, "id": product_id},
            )
            if affected == 0:
                raise NotFoundError("Product", str(product_id))
        return self.get_by_id(product_id)

    def delete_product(self, product_id: int) -> bool:
        affected = self.execute_command("DELETE FROM products WHERE id = :id", {"id": product_id})
        return affected > 0

    def count_in_category(self, category_id: int) -> int:
        return int(
            self.execute_scalar(
                "SELECT COUNT(*) FROM products WHERE category_id = :category_id",
                {"category_id": category_id},
            ) or 0
        )
