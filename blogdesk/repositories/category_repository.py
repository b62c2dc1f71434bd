# blogdesk/repositories/category_repository.py
import logging
from typing import Optional, List, Dict, Any

from blogdesk.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = "id, name, slug, description"


class CategoryRepository(BaseRepository[Dict]):
    """Repository for Category entity operations."""

    async def get_by_id(self, category_id: int) -> Optional[Dict]:
        """Fetch single category by ID."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(
                    f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = $1",
                    category_id
                )
            else:
                cursor = await conn.execute(
                    f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = ?",
                    (category_id,)
                )
                row = await cursor.fetchone()
            return dict(row) if row else None

    async def get_by_slug(self, slug: str) -> Optional[Dict]:
        """Fetch single category by slug."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(
                    f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE slug = $1",
                    slug
                )
            else:
                cursor = await conn.execute(
                    f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE slug = ?",
                    (slug,)
                )
                row = await cursor.fetchone()
            return dict(row) if row else None

    async def get_all(self, **filters: Any) -> List[Dict]:
        """Fetch all categories ordered by name, Z to A."""
        query = f"SELECT {CATEGORY_COLUMNS} FROM categories ORDER BY name DESC"

        async with self.db.connection() as conn:
            if self.use_postgres:
                rows = await conn.fetch(query)
            else:
                cursor = await conn.execute(query)
                rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    async def create(self, data: Dict[str, Any]) -> Dict:
        """Create a new category."""
        name = data["name"]
        slug = data["slug"]
        description = data.get("description")

        async with self.db.transaction() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(
                    f"INSERT INTO categories (name, slug, description) VALUES ($1, $2, $3) RETURNING {CATEGORY_COLUMNS}",
                    name, slug, description
                )
                return dict(row)

            cursor = await conn.execute(
                "INSERT INTO categories (name, slug, description) VALUES (?, ?, ?)",
                (name, slug, description)
            )
            return {
                "id": cursor.lastrowid,
                "name": name,
                "slug": slug,
                "description": description,
            }

    async def update(
        self, category_id: int, data: Dict[str, Any]
    ) -> Optional[Dict]:
        """Update the supplied columns of a category. Returns None if it does not exist."""
        fields = []
        params = []
        param_idx = 1

        for column in ("name", "slug", "description"):
            if column not in data:
                continue
            if self.use_postgres:
                fields.append(f"{column} = ${param_idx}")
                param_idx += 1
            else:
                fields.append(f"{column} = ?")
            params.append(data[column])

        if not fields:
            return await self.get_by_id(category_id)

        params.append(category_id)

        async with self.db.transaction() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(
                    f"UPDATE categories SET {', '.join(fields)} WHERE id = ${param_idx} RETURNING {CATEGORY_COLUMNS}",
                    *params
                )
                return dict(row) if row else None

            cursor = await conn.execute(
                f"UPDATE categories SET {', '.join(fields)} WHERE id = ?",
                tuple(params)
            )
            if cursor.rowcount == 0:
                return None
            cursor = await conn.execute(
                f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = ?",
                (category_id,)
            )
            row = await cursor.fetchone()
            return dict(row)

    async def delete(self, category_id: int) -> bool:
        """Unlink the category from every post, then delete it, in one transaction."""
        async with self.db.transaction() as conn:
            if self.use_postgres:
                unlinked = await conn.execute(
                    "DELETE FROM posts_to_categories WHERE category_id = $1", category_id
                )
                result = await conn.execute("DELETE FROM categories WHERE id = $1", category_id)
                deleted = result != "DELETE 0"
            else:
                cursor = await conn.execute(
                    "DELETE FROM posts_to_categories WHERE category_id = ?", (category_id,)
                )
                unlinked = f"DELETE {cursor.rowcount}"
                cursor = await conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
                deleted = cursor.rowcount > 0

        logger.info(f"Category {category_id} delete: removed={deleted}, links {unlinked}")
        return deleted

    async def count(self, **filters: Any) -> int:
        """Get total number of categories."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                count = await conn.fetchval("SELECT COUNT(*) FROM categories")
                return count or 0
            cursor = await conn.execute("SELECT COUNT(*) FROM categories")
            row = await cursor.fetchone()
            return row[0] if row else 0
