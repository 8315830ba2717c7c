"""
Persistence seam
The pipeline only talks to the Repository interface; storage engines live elsewhere.
"""

from src.persistence.repository import Repository, RecordNotFoundError
from src.persistence.memory import InMemoryRepository

__all__ = [
    "Repository",
    "RecordNotFoundError",
    "InMemoryRepository",
]
