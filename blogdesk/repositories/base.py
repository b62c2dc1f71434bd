# blogdesk/repositories/base.py
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Generic, TypeVar

from blogdesk.database import BlogDatabase

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository class defining the standard CRUD interface."""

    def __init__(self, db: BlogDatabase):
        self.db = db

    @property
    def use_postgres(self) -> bool:
        return self.db.use_postgres

    @abstractmethod
    async def get_by_id(self, entity_id: int) -> Optional[T]:
        """Retrieve a single entity by its ID."""
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[T]:
        """Retrieve a single entity by its slug."""
        pass

    @abstractmethod
    async def get_all(self, **filters: Any) -> List[T]:
        """Retrieve entities with optional filters."""
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> T:
        """Create a new entity and return it."""
        pass

    @abstractmethod
    async def update(
        self, entity_id: int, data: Dict[str, Any]
    ) -> Optional[T]:
        """Update an existing entity and return the updated version."""
        pass

    @abstractmethod
    async def delete(self, entity_id: int) -> bool:
        """Delete an entity together with its links. Returns True if a row was removed."""
        pass

    @abstractmethod
    async def count(self, **filters: Any) -> int:
        """Count entities matching the given filters."""
        pass
