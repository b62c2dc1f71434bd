# blogdesk/repositories/post_repository.py
import logging
from typing import Optional, List, Dict, Any, Iterable
from datetime import datetime, timezone

from blogdesk.database import PG_UTC_NOW
from blogdesk.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

POST_COLUMNS = "p.id, p.title, p.slug, p.content, p.published, p.created_at, p.updated_at"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def _to_post(row) -> Dict:
    post = dict(row)
    post["published"] = bool(post["published"])
    return post


class PostRepository(BaseRepository[Dict]):
    """Repository for Post entity operations, including its category links."""

    async def get_by_id(self, post_id: int) -> Optional[Dict]:
        """Fetch single post by ID (no categories)."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(f"SELECT {POST_COLUMNS} FROM posts p WHERE p.id = $1", post_id)
            else:
                cursor = await conn.execute(f"SELECT {POST_COLUMNS} FROM posts p WHERE p.id = ?", (post_id,))
                row = await cursor.fetchone()
            return _to_post(row) if row else None

    async def get_category_ids(self, post_id: int) -> List[int]:
        """Fetch the ids of every category linked to a post."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                rows = await conn.fetch(
                    "SELECT category_id FROM posts_to_categories WHERE post_id = $1 ORDER BY category_id",
                    post_id
                )
            else:
                cursor = await conn.execute(
                    "SELECT category_id FROM posts_to_categories WHERE post_id = ? ORDER BY category_id",
                    (post_id,)
                )
                rows = await cursor.fetchall()
            return [row["category_id"] for row in rows]

    async def get_by_slug(self, slug: str) -> Optional[Dict]:
        """Fetch single post by slug with its categories."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(f"SELECT {POST_COLUMNS} FROM posts p WHERE p.slug = $1", slug)
            else:
                cursor = await conn.execute(f"SELECT {POST_COLUMNS} FROM posts p WHERE p.slug = ?", (slug,))
                row = await cursor.fetchone()
            if not row:
                return None
            posts = await self._attach_categories(conn, [_to_post(row)])
            return posts[0]

    async def get_all(self, **filters: Any) -> List[Dict]:
        """Fetch posts with categories, newest first.

        ``category_id`` keeps posts linked to that category; ``search_term``
        keeps posts whose title contains the term, ignoring case.
        """
        category_id = filters.get("category_id")
        search_term = filters.get("search_term")

        conditions = []
        params = []
        param_idx = 1

        if category_id is not None:
            placeholder = f"${param_idx}" if self.use_postgres else "?"
            conditions.append(
                "EXISTS (SELECT 1 FROM posts_to_categories pc "
                f"WHERE pc.post_id = p.id AND pc.category_id = {placeholder})"
            )
            params.append(category_id)
            param_idx += 1

        if search_term:
            if self.use_postgres:
                conditions.append(f"p.title ILIKE ${param_idx} ESCAPE '\\'")
                params.append(f"%{escape_like(search_term)}%")
            else:
                # SQLite LIKE only folds ASCII; casefold() is registered per connection
                conditions.append("instr(casefold(p.title), casefold(?)) > 0")
                params.append(search_term)
            param_idx += 1

        query = f"SELECT {POST_COLUMNS} FROM posts p"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY p.created_at DESC, p.id DESC"

        async with self.db.connection() as conn:
            if self.use_postgres:
                rows = await conn.fetch(query, *params)
            else:
                cursor = await conn.execute(query, tuple(params))
                rows = await cursor.fetchall()
            return await self._attach_categories(conn, [_to_post(row) for row in rows])

    async def _attach_categories(self, conn, posts: List[Dict]) -> List[Dict]:
        """Load the linked categories of every post in one query."""
        for post in posts:
            post["categories"] = []
        if not posts:
            return posts

        post_ids = [post["id"] for post in posts]
        if self.use_postgres:
            rows = await conn.fetch(
                """
                SELECT pc.post_id, c.id, c.name, c.slug
                FROM posts_to_categories pc
                INNER JOIN categories c ON pc.category_id = c.id
                WHERE pc.post_id = ANY($1::int[])
                ORDER BY c.name
                """,
                post_ids
            )
        else:
            placeholders = ", ".join("?" for _ in post_ids)
            cursor = await conn.execute(
                f"""
                SELECT pc.post_id, c.id, c.name, c.slug
                FROM posts_to_categories pc
                INNER JOIN categories c ON pc.category_id = c.id
                WHERE pc.post_id IN ({placeholders})
                ORDER BY c.name
                """,
                tuple(post_ids)
            )
            rows = await cursor.fetchall()

        by_id = {post["id"]: post for post in posts}
        for row in rows:
            by_id[row["post_id"]]["categories"].append(
                {"id": row["id"], "name": row["name"], "slug": row["slug"]}
            )
        return posts

    async def _insert_links(self, conn, post_id: int, category_ids: Iterable[int]) -> None:
        links = [(post_id, category_id) for category_id in category_ids]
        if not links:
            return
        if self.use_postgres:
            await conn.executemany(
                "INSERT INTO posts_to_categories (post_id, category_id) VALUES ($1, $2)", links
            )
        else:
            await conn.executemany(
                "INSERT INTO posts_to_categories (post_id, category_id) VALUES (?, ?)", links
            )

    async def create(self, data: Dict[str, Any]) -> Dict:
        """Insert a post and its category links in one transaction."""
        title = data["title"]
        slug = data["slug"]
        content = data.get("content")
        published = bool(data.get("published", False))
        category_ids = data.get("category_ids") or []

        async with self.db.transaction() as conn:
            if self.use_postgres:
                row = await conn.fetchrow(
                    "INSERT INTO posts (title, slug, content, published, created_at, updated_at) "
                    f"VALUES ($1, $2, $3, $4, {PG_UTC_NOW}, {PG_UTC_NOW}) "
                    "RETURNING id, title, slug, content, published, created_at, updated_at",
                    title, slug, content, published
                )
                post = _to_post(row)
            else:
                now = utcnow()
                cursor = await conn.execute(
                    "INSERT INTO posts (title, slug, content, published, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?)",
                    (title, slug, content, int(published), now.isoformat(timespec="microseconds"),
                     now.isoformat(timespec="microseconds"))
                )
                post = {
                    "id": cursor.lastrowid,
                    "title": title,
                    "slug": slug,
                    "content": content,
                    "published": published,
                    "created_at": now,
                    "updated_at": now,
                }

            await self._insert_links(conn, post["id"], category_ids)

        logger.info(f"Created post {post['id']} ({slug!r}) with {len(category_ids)} category link(s)")
        return post

    async def update(
        self, post_id: int, data: Dict[str, Any]
    ) -> Optional[Dict]:
        """Partially update a post. Returns None if it does not exist.

        ``updated_at`` is always refreshed. When ``category_ids`` is present in
        ``data`` (even empty) it replaces every existing link.
        """
        fields = []
        params = []
        param_idx = 1

        for column in ("title", "slug", "content", "published"):
            if column not in data:
                continue
            value = data[column]
            if self.use_postgres:
                fields.append(f"{column} = ${param_idx}")
                param_idx += 1
            else:
                fields.append(f"{column} = ?")
                if column == "published":
                    value = int(value)
            params.append(value)

        async with self.db.transaction() as conn:
            if self.use_postgres:
                fields.append(f"updated_at = {PG_UTC_NOW}")
                params.append(post_id)
                row = await conn.fetchrow(
                    f"UPDATE posts SET {', '.join(fields)} WHERE id = ${param_idx} "
                    "RETURNING id, title, slug, content, published, created_at, updated_at",
                    *params
                )
                if row is None:
                    return None
                post = _to_post(row)
            else:
                fields.append("updated_at = ?")
                params.append(utcnow().isoformat(timespec="microseconds"))
                params.append(post_id)
                cursor = await conn.execute(
                    f"UPDATE posts SET {', '.join(fields)} WHERE id = ?",
                    tuple(params)
                )
                if cursor.rowcount == 0:
                    return None
                cursor = await conn.execute(f"SELECT {POST_COLUMNS} FROM posts p WHERE p.id = ?", (post_id,))
                post = _to_post(await cursor.fetchone())

            if "category_ids" in data:
                if self.use_postgres:
                    await conn.execute("DELETE FROM posts_to_categories WHERE post_id = $1", post_id)
                else:
                    await conn.execute("DELETE FROM posts_to_categories WHERE post_id = ?", (post_id,))
                await self._insert_links(conn, post_id, data["category_ids"] or [])

        return post

    async def delete(self, post_id: int) -> bool:
        """Remove the post's category links, then the post, in one transaction."""
        async with self.db.transaction() as conn:
            if self.use_postgres:
                await conn.execute("DELETE FROM posts_to_categories WHERE post_id = $1", post_id)
                result = await conn.execute("DELETE FROM posts WHERE id = $1", post_id)
                return result != "DELETE 0"
            await conn.execute("DELETE FROM posts_to_categories WHERE post_id = ?", (post_id,))
            cursor = await conn.execute("DELETE FROM posts WHERE id = ?", (post_id,))
            return cursor.rowcount > 0

    async def count(self, **filters: Any) -> int:
        """Get total number of posts."""
        async with self.db.connection() as conn:
            if self.use_postgres:
                count = await conn.fetchval("SELECT COUNT(*) FROM posts")
                return count or 0
            cursor = await conn.execute("SELECT COUNT(*) FROM posts")
            row = await cursor.fetchone()
            return row[0] if row else 0
