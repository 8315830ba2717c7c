"""
Page/limit pagination over a repository
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from src.persistence.repository import Repository

T = TypeVar("T")

MAX_LIMIT = 100


@dataclass
class Page(Generic[T]):
    data: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def meta(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def paginate(
    repository: Repository,
    page: int = 1,
    limit: int = 20,
    order_by: Optional[str] = None,
    descending: bool = False,
    **filters: Any
) -> Page:
    """
    Fetch one page of entities matching ``filters``.

    ``page`` is 1-based; ``limit`` is clamped to 1..MAX_LIMIT.
    """
    page = max(1, page)
    limit = min(max(1, limit), MAX_LIMIT)

    total = repository.count(**filters)
    data = repository.find_many(
        order_by=order_by,
        descending=descending,
        offset=(page - 1) * limit,
        limit=limit,
        **filters
    )
    return Page(data=data, total=total, page=page, limit=limit)
