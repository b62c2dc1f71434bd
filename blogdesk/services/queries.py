# blogdesk/services/queries.py
from typing import Optional, List

from blogdesk.database import BlogDatabase
from blogdesk.errors import NotFound
from blogdesk.repositories import PostRepository, CategoryRepository
from blogdesk.schemas import Category, PostEditView, PostListQuery, PostWithCategories
from blogdesk.services.common import storage_errors, validate_input


class QueryService:
    """Read-only access to posts and categories."""

    def __init__(self, db: BlogDatabase):
        self.posts = PostRepository(db)
        self.categories = CategoryRepository(db)

    async def list_posts(
        self, category_id: Optional[int] = None, search_term: Optional[str] = None
    ) -> List[PostWithCategories]:
        query = validate_input(PostListQuery, category_id=category_id, search_term=search_term)
        async with storage_errors("Post"):
            rows = await self.posts.get_all(
                category_id=query.category_id, search_term=query.search_term
            )
        return [PostWithCategories.model_validate(row) for row in rows]

    async def get_post_by_slug(self, slug: str) -> PostWithCategories:
        async with storage_errors("Post"):
            row = await self.posts.get_by_slug(slug)
        if row is None:
            raise NotFound("Post not found")
        return PostWithCategories.model_validate(row)

    async def get_post_by_id(self, post_id: int) -> PostEditView:
        async with storage_errors("Post"):
            row = await self.posts.get_by_id(post_id)
            if row is None:
                raise NotFound("Post not found")
            category_ids = await self.posts.get_category_ids(post_id)
        return PostEditView(
            id=row["id"],
            title=row["title"],
            content=row["content"] or "",
            published=row["published"],
            category_ids=category_ids,
        )

    async def list_categories(self) -> List[Category]:
        async with storage_errors("Category"):
            rows = await self.categories.get_all()
        return [Category.model_validate(row) for row in rows]

    async def get_category_by_slug(self, slug: str) -> Category:
        async with storage_errors("Category"):
            row = await self.categories.get_by_slug(slug)
        if row is None:
            raise NotFound("Category not found")
        return Category.model_validate(row)

    async def count_posts(self) -> int:
        async with storage_errors("Post"):
            return await self.posts.count()

    async def count_categories(self) -> int:
        async with storage_errors("Category"):
            return await self.categories.count()
