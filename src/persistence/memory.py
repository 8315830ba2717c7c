"""
Thread-safe in-memory repository
Backs the CLI, the web app's default wiring and the test suite.
"""

import threading
from typing import Any, Dict, List, Optional

from src.persistence.repository import Repository, RecordNotFoundError, T


class InMemoryRepository(Repository[T]):

    def __init__(self):
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()

    def create(self, entity: T) -> T:
        with self._lock:
            self._items[entity.id] = entity
        return entity

    def update(self, entity_id: str, **changes: Any) -> T:
        with self._lock:
            current = self._items.get(entity_id)
            if current is None:
                raise RecordNotFoundError(f"No record with id {entity_id}")
            updated = current.model_copy(update=changes)
            self._items[entity_id] = updated
        return updated

    def find_by_id(self, entity_id: str) -> Optional[T]:
        with self._lock:
            return self._items.get(entity_id)

    def find_many(
        self,
        order_by: Optional[str] = None,
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
        **filters: Any
    ) -> List[T]:
        with self._lock:
            items = list(self._items.values())

        matches = [item for item in items if self._matches(item, filters)]
        if order_by:
            # None sorts last regardless of direction
            present = [item for item in matches if getattr(item, order_by) is not None]
            missing = [item for item in matches if getattr(item, order_by) is None]
            present.sort(key=lambda item: getattr(item, order_by), reverse=descending)
            matches = present + missing

        end = None if limit is None else offset + limit
        return matches[offset:end]

    def count(self, **filters: Any) -> int:
        with self._lock:
            items = list(self._items.values())
        return sum(1 for item in items if self._matches(item, filters))

    def delete(self, entity_id: str) -> T:
        with self._lock:
            entity = self._items.pop(entity_id, None)
        if entity is None:
            raise RecordNotFoundError(f"No record with id {entity_id}")
        return entity

    @staticmethod
    def _matches(item: T, filters: Dict[str, Any]) -> bool:
        return all(getattr(item, key) == value for key, value in filters.items())
