"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

``ISlipRepository[S]`` adds the claim book-keeping every batch document
(return slips, payment slips) shares.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Generic, Iterable, List, Optional, Set, TypeVar

T = TypeVar("T")
S = TypeVar("S")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the aggregate managed by the
    repository (e.g. ``Order``, ``DriverSlip``).
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """List entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""


class ISlipRepository(IRepository[S]):
    """Slip aggregates and the orders their open entries claim."""

    @abstractmethod
    def create(self, header: Dict[str, Any], entries: List[Dict[str, Any]]) -> S:
        """Insert a slip and its entries; ``item_count`` follows the entries."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[S]:
        """Retrieve a slip holding a row lock."""

    @abstractmethod
    def open_claims(self, order_ids: Iterable[str]) -> Set[str]:
        """Subset of *order_ids* already on an open slip of this kind."""

    @abstractmethod
    def release_claims(self, order_ids: Iterable[str], released_at: datetime) -> int:
        """Close the open entries of *order_ids*; returns how many closed."""
