"""
Generic repository interface for persisted entities
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class RecordNotFoundError(Exception):
    """Raised when an update or delete targets an id that does not exist"""
    pass


class Repository(ABC, Generic[T]):
    """
    Narrow storage contract consumed by the services.
    Implementations may be SQL, document or in-memory.
    """

    @abstractmethod
    def create(self, entity: T) -> T:
        """Insert a new entity and return the stored copy"""
        pass

    @abstractmethod
    def update(self, entity_id: str, **changes: Any) -> T:
        """
        Apply field changes to an existing entity.

        Raises:
            RecordNotFoundError: If no entity has this id
        """
        pass

    @abstractmethod
    def find_by_id(self, entity_id: str) -> Optional[T]:
        pass

    @abstractmethod
    def find_many(
        self,
        order_by: Optional[str] = None,
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
        **filters: Any
    ) -> List[T]:
        """Return entities whose fields equal every filter value"""
        pass

    @abstractmethod
    def count(self, **filters: Any) -> int:
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> T:
        """
        Remove an entity and return it.

        Raises:
            RecordNotFoundError: If no entity has this id
        """
        pass
