# blogdesk/services/mutations.py
import logging
from typing import Optional, List

from blogdesk.database import BlogDatabase
from blogdesk.errors import NotFound
from blogdesk.repositories import PostRepository, CategoryRepository
from blogdesk.schemas import (
    Category, CategoryCreate, CategoryUpdate, DeleteResult, Post, PostCreate, PostUpdate,
)
from blogdesk.services.common import storage_errors, unique_ids, validate_input
from blogdesk.slug import slugify

logger = logging.getLogger(__name__)


class MutationService:
    """The only writer: create/update/delete for posts and categories.

    Slugs are computed here before every write. Each operation that touches
    the junction table runs in a single storage transaction.
    """

    def __init__(self, db: BlogDatabase):
        self.posts = PostRepository(db)
        self.categories = CategoryRepository(db)

    # --- Post ---

    async def create_post(
        self,
        title: str,
        content: Optional[str] = None,
        category_ids: Optional[List[int]] = None,
        published: bool = False,
    ) -> Post:
        payload = validate_input(
            PostCreate, title=title, content=content, category_ids=category_ids, published=published
        )
        data = {
            "title": payload.title,
            "slug": slugify(payload.title),
            "content": payload.content,
            "published": payload.published,
            "category_ids": unique_ids(payload.category_ids or []),
        }
        async with storage_errors("Post"):
            row = await self.posts.create(data)
        return Post.model_validate(row)

    async def update_post(self, post_id: int, **changes) -> Post:
        """Partial update; only the keyword arguments given are changed.

        Accepts ``title``, ``content``, ``published`` and ``category_ids``.
        ``category_ids`` (even ``[]``) replaces every link of the post.
        """
        payload = validate_input(PostUpdate, id=post_id, **changes)
        data = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        if "title" in data:
            data["slug"] = slugify(data["title"])
        if "category_ids" in data:
            data["category_ids"] = unique_ids(data["category_ids"])

        async with storage_errors("Post"):
            row = await self.posts.update(payload.id, data)
        if row is None:
            raise NotFound("Post not found")
        return Post.model_validate(row)

    async def delete_post(self, post_id: int) -> DeleteResult:
        async with storage_errors("Post"):
            deleted = await self.posts.delete(post_id)
        if not deleted:
            logger.info(f"Post {post_id} was already absent; delete is a no-op")
        return DeleteResult(success=True)

    # --- Category ---

    async def create_category(self, name: str, description: Optional[str] = None) -> Category:
        payload = validate_input(CategoryCreate, name=name, description=description)
        data = {
            "name": payload.name,
            "slug": slugify(payload.name),
            "description": payload.description,
        }
        async with storage_errors("Category"):
            row = await self.categories.create(data)
        return Category.model_validate(row)

    async def update_category(self, category_id: int, **changes) -> Category:
        """Partial update; the slug follows ``name`` only when ``name`` is given."""
        payload = validate_input(CategoryUpdate, id=category_id, **changes)
        data = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        if "name" in data:
            data["slug"] = slugify(data["name"])

        async with storage_errors("Category"):
            row = await self.categories.update(payload.id, data)
        if row is None:
            raise NotFound("Category not found")
        return Category.model_validate(row)

    async def delete_category(self, category_id: int) -> DeleteResult:
        async with storage_errors("Category"):
            await self.categories.delete(category_id)
        return DeleteResult(success=True)
