"""Abstract models shared by every aggregate.

``BaseModel`` provides a UUIDv7 primary key (time-ordered, so batches
locked "by id" are also locked roughly by creation order) plus
``created_at`` / ``updated_at`` bookkeeping.
``Slip`` and ``ClaimEntry`` are the header and line of every batch
document (return slips, payment slips) that claims orders.
"""

from __future__ import annotations

import secrets

import uuid6
from django.db import models
from django.utils import timezone

from shared.domain.events import DomainEventMixin


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


REFERENCE_MAX_RETRIES = 5


class Slip(DomainEventMixin, BaseModel):
    """Header of a batch document that claims a set of orders.

    ``reference`` is generated on first save as
    ``<PREFIX>-YYYYMMDD-XXXXXX``; subclasses set ``reference_prefix``.
    """

    reference_prefix = ""

    reference = models.CharField(max_length=20, unique=True, editable=False)
    date = models.DateField(default=timezone.localdate)
    item_count = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    @classmethod
    def generate_reference(cls) -> str:
        suffix = secrets.token_hex(3).upper()
        return f"{cls.reference_prefix}-{timezone.now():%Y%m%d}-{suffix}"

    def save(self, *args, **kwargs) -> None:
        if not self.reference:
            manager = type(self).objects
            for _attempt in range(REFERENCE_MAX_RETRIES):
                candidate = self.generate_reference()
                if not manager.filter(reference=candidate).exists():
                    self.reference = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique reference after "
                    f"{REFERENCE_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    @property
    def party_name(self) -> str:
        raise NotImplementedError

    @property
    def ordered_entries(self) -> list:
        return sorted(self.entries.all(), key=lambda e: e.position)

    @property
    def order_ids(self) -> list[str]:
        return [str(entry.order_id) for entry in self.ordered_entries]

    def __str__(self) -> str:
        return f"{self.reference} ({self.party_name}, {self.item_count})"


class ClaimEntry(BaseModel):
    """One order on a slip.

    The entry is *open* while ``released_at`` is null.  Concrete entries
    add the ``slip`` foreign key and a partial unique constraint on
    ``order`` so an order sits on at most one open slip of each kind.
    """

    position = models.PositiveIntegerField()
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="+",
    )
    order_number = models.PositiveIntegerField()
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True
        ordering = ["position"]

    @property
    def is_open(self) -> bool:
        return self.released_at is None
