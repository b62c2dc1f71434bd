# blogdesk/repositories/__init__.py
from blogdesk.repositories.post_repository import PostRepository
from blogdesk.repositories.category_repository import CategoryRepository

__all__ = ["PostRepository", "CategoryRepository"]
