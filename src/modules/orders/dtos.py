"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: intake of a new order.
- ``UpdateOrderStatusDTO``: a single status transition request.
- ``BulkStatusUpdateDTO``: the same transition applied to many orders.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import DEFAULT_DELIVERY_FEE, DEFAULT_DRIVER_FEE


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order intake.

    ``item_price`` is optional: when omitted the service derives it as
    ``cod - delivery_fee - additional_cost``.
    """

    model_config = ConfigDict(frozen=True)

    recipient: str
    phone: str = ""
    address: str = ""
    city: str = ""
    region: str = ""
    merchant: str = ""
    driver: Optional[str] = None
    source: str = ""
    reference_number: str = ""
    cod: Decimal = Decimal("0.00")
    item_price: Optional[Decimal] = None
    delivery_fee: Decimal = DEFAULT_DELIVERY_FEE
    additional_cost: Decimal = Decimal("0.00")
    driver_fee: Decimal = DEFAULT_DRIVER_FEE
    driver_additional_fare: Decimal = Decimal("0.00")
    date: Optional[dt.date] = None
    notes: str = ""

    @field_validator("recipient")
    @classmethod
    def recipient_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Recipient is required.")
        return v

    @field_validator("cod")
    @classmethod
    def cod_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("COD cannot be negative.")
        return v

    @field_validator("driver")
    @classmethod
    def blank_driver_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class UpdateOrderStatusDTO(BaseModel):
    """Immutable DTO for a single status transition request."""

    model_config = ConfigDict(frozen=True)

    status: str
    driver_name: Optional[str] = None
    actor_role: Optional[str] = None
    notes: str = ""


class BulkStatusUpdateDTO(BaseModel):
    """Immutable DTO applying one transition to a set of orders.

    Validates:
    - ``order_ids`` must contain at least one id.
    - ``order_ids`` must not repeat an id.
    """

    model_config = ConfigDict(frozen=True)

    order_ids: List[UUID]
    status: str
    driver_name: Optional[str] = None
    actor_role: Optional[str] = None
    notes: str = ""

    @field_validator("order_ids")
    @classmethod
    def order_ids_must_not_be_empty(cls, v: List[UUID]) -> List[UUID]:
        if not v:
            raise ValueError("At least one order id is required.")
        return v

    @model_validator(mode="after")
    def no_duplicate_orders(self):
        if len(self.order_ids) != len(set(self.order_ids)):
            raise ValueError("Duplicate order IDs are not allowed.")
        return self
