"""Returns DTOs for the Service Layer.

Immutable Pydantic v2 contracts between the API layer and
``ReturnsService``.  Party-name and order-selection rules come from
``modules.core.dtos``.
"""

from __future__ import annotations

from modules.core.dtos import DriverSlipRequestDTO, MerchantSlipRequestDTO


class CreateDriverSlipDTO(DriverSlipRequestDTO):
    """Parcels a driver hands back to the branch."""


class CreateMerchantSlipDTO(MerchantSlipRequestDTO):
    """Parcels the branch hands back to a merchant."""
