from datetime import datetime, timezone
from typing import List, Optional

from jewelry_storefront.core.exceptions import NotFoundError
from jewelry_storefront.models.product import Category
from jewelry_storefront.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):

    @property
    def table_name(self) -> str:
        return "categories"

    def get_by_id(self, category_id: int) -> Category:
        row = self.execute_single_query(
            "SELECT id, name, description, image_url, created_at FROM categories WHERE id = :id",
            {"id": category_id},
        )
        if not row:
            raise NotFoundError("Category", str(category_id))
        return Category.from_row(row)

    def get_by_name(self, name: str) -> Optional[Category]:
        row = self.execute_single_query(
            "SELECT id, name, description, image_url, created_at FROM categories"
            " WHERE LOWER(name) = LOWER(:name)",
            {"name": name},
        )
        return Category.from_row(row) if row else None

    def list_categories(self) -> List[Category]:
        rows = self.execute_query(
            """
            SELECT c.id, c.name, c.description, c.image_url, c.created_at,
                   COUNT(p.id) AS product_count
            FROM categories c
            LEFT JOIN products p ON p.category_id = c.id
            GROUP BY c.id, c.name, c.description, c.image_url, c.created_at
            ORDER BY c.name
            """
        )
        return [Category.from_row(row) for row in rows]

    def create_category(self, name: str, description: str = "", image_url: Optional[str] = None) -> Category:
        category_id = self.execute_insert_returning_id(
            """
            INSERT INTO categories (name, description, image_url, created_at)
            VALUES (:name, :description, :image_url, :created_at)
            """,
            {
                "name": name,
                "description": description or "",
                "image_url": image_url,
                "created_at": datetime.now(timezone.utc),
            },
        )
        return self.get_by_id(category_id)

    def delete_category(self, category_id: int) -> bool:
        affected = self.execute_command("DELETE FROM categories WHERE id = :id", {"id": category_id})
        return affected > 0
