"""Generic repository interface (Dependency Inversion Principle).

``IRepository[T]`` is the persistence contract the catalog services
depend on: keyed get/put/delete plus a filtered listing.  Concrete
adapters (Django ORM today) live next to each module.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` is the aggregate managed by the repository
    (``Product``, ``Variant``).  Look-ups return ``None`` for missing or
    malformed IDs instead of raising.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Sequence[T]:
        """List entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Remove an entity by ID; ``False`` when it did not exist."""
