"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order Store and the
Returns Aggregator need: intake with order-number allocation, row
locking (single and batch), party look-ups and the status audit trail.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert a new order, allocating the next ``order_number``."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row lock until the transaction ends."""

    @abstractmethod
    def lock_many(self, ids: Sequence[str]) -> Dict[str, Order]:
        """Lock every listed order, in ascending id order.

        Returns a mapping of ``str(id)`` to order; unknown ids are absent.
        """

    @abstractmethod
    def list_by_driver(
        self, driver_name: str, statuses: Optional[Iterable[str]] = None
    ) -> List[Order]:
        """Orders currently assigned to *driver_name*."""

    @abstractmethod
    def list_by_merchant(
        self, merchant_name: str, statuses: Optional[Iterable[str]] = None
    ) -> List[Order]:
        """Orders belonging to *merchant_name*."""

    @abstractmethod
    def add_history(
        self,
        order: Order,
        old_status: Optional[str],
        new_status: str,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
