"""Slip request DTOs shared by the returns and settlements modules.

Every slip request validates that ``order_ids`` holds at least one id,
no more than ``MAX_SLIP_ORDERS`` and no duplicates.
"""

from __future__ import annotations

from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.core.constants import MAX_SLIP_ORDERS


def require_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Party name is required.")
    return v


class SlipRequestDTO(BaseModel):
    """Order selection shared by every slip kind."""

    model_config = ConfigDict(frozen=True)

    order_ids: List[UUID]

    @field_validator("order_ids")
    @classmethod
    def order_ids_within_bounds(cls, v: List[UUID]) -> List[UUID]:
        if not v:
            raise ValueError("A slip needs at least one order.")
        if len(v) > MAX_SLIP_ORDERS:
            raise ValueError(f"A slip holds at most {MAX_SLIP_ORDERS} orders.")
        return v

    @model_validator(mode="after")
    def no_duplicate_orders(self):
        if len(self.order_ids) != len(set(self.order_ids)):
            raise ValueError("Duplicate order IDs are not allowed on a slip.")
        return self


class DriverSlipRequestDTO(SlipRequestDTO):
    driver_name: str

    @field_validator("driver_name")
    @classmethod
    def driver_name_required(cls, v: str) -> str:
        return require_name(v)


class MerchantSlipRequestDTO(SlipRequestDTO):
    merchant_name: str

    @field_validator("merchant_name")
    @classmethod
    def merchant_name_required(cls, v: str) -> str:
        return require_name(v)
