"""Django ORM base for slip repositories.

Slip creation inserts the header and all entries inside one
transaction; the partial unique index on open entries is the final
guard against two slips claiming the same order.  Domain events are
published after commit.

``holding_status`` is the order status an open entry of this kind
holds the order in.  When the Order Store moves an order to any other
status, ``release_stale_claims`` closes the entry in the same
transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Type

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from shared.infrastructure.bus import flush_domain_events

logger = structlog.get_logger(__name__)


class SlipDjangoRepository:
    """Behaviour common to every slip kind."""

    slip_model: Type[models.Model]
    entry_model: Type[models.Model]
    holding_status: str

    @transaction.atomic
    def create(self, header: Dict[str, Any], entries: List[Dict[str, Any]]) -> Any:
        slip = self.slip_model(item_count=len(entries), **header)
        slip.save()
        self.entry_model.objects.bulk_create(
            [self.entry_model(slip=slip, **entry) for entry in entries]
        )
        logger.info(
            "slips.slip_inserted",
            slip_kind=self.slip_model.__name__,
            slip_id=str(slip.id),
            reference=slip.reference,
            item_count=slip.item_count,
        )
        return slip

    def get_by_id(self, id: str) -> Optional[Any]:
        """Return ``None`` for non-existent or malformed IDs."""
        try:
            return (
                self.slip_model.objects.prefetch_related("entries")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Any]:
        try:
            return self.slip_model.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Any]:
        queryset = self.slip_model.objects.prefetch_related("entries")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Any) -> Any:
        entity.save()
        event_count = flush_domain_events(entity)
        logger.debug(
            "slips.slip_saved", slip_id=str(entity.id), event_count=event_count
        )
        return entity

    def _open_entries(self, order_ids: Iterable[str]) -> models.QuerySet:
        return self.entry_model.objects.filter(
            order_id__in=list(order_ids), released_at__isnull=True
        )

    def open_claims(self, order_ids: Iterable[str]) -> Set[str]:
        claimed = self._open_entries(order_ids).values_list("order_id", flat=True)
        return {str(order_id) for order_id in claimed}

    def release_claims(self, order_ids: Iterable[str], released_at: datetime) -> int:
        released = self._open_entries(order_ids).update(released_at=released_at)
        if released:
            logger.info(
                "slips.claims_released",
                slip_kind=self.slip_model.__name__,
                entry_count=released,
            )
        return released


def release_stale_claims(
    repositories: Iterable[SlipDjangoRepository],
    order_id: str,
    new_status: str,
    released_at: datetime,
) -> int:
    """Close every open entry whose holding status the order just left."""
    released = 0
    for repository in repositories:
        if new_status != repository.holding_status:
            released += repository.release_claims([order_id], released_at)
    return released
