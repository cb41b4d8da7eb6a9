"""Transition Validator.

Decides whether an order may move from one status to another.  Failure
is reported as a value, never raised, so callers can render the reason
inline.  There is no directed graph: any active status may follow any
other, and the driver requirement and setter roles are the only gates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from modules.orders.constants import UNASSIGNED_DRIVER
from modules.orders.statuses import get_status

UNKNOWN_STATUS = "unknown_status"
STATUS_UNCHANGED = "status_unchanged"
DRIVER_REQUIRED = "driver_required"
ROLE_NOT_PERMITTED = "role_not_permitted"

_MESSAGES = {
    UNKNOWN_STATUS: "unknown or inactive status",
    STATUS_UNCHANGED: "status unchanged",
    DRIVER_REQUIRED: "driver required for this status",
    ROLE_NOT_PERMITTED: "role not permitted to set this status",
}


@dataclass(frozen=True)
class TransitionResult:
    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def ok(cls) -> TransitionResult:
        return cls(valid=True)

    @classmethod
    def rejected(cls, code: str) -> TransitionResult:
        return cls(valid=False, error=_MESSAGES[code], code=code)

    def __bool__(self) -> bool:
        return self.valid


def is_driver_assigned(driver_name: Optional[str]) -> bool:
    """Blank names and the unassigned placeholder count as no driver."""
    if driver_name is None:
        return False
    name = str(driver_name).strip()
    return bool(name) and name != UNASSIGNED_DRIVER


def validate_transition(
    current_status: Optional[str],
    target_status: Optional[str],
    driver_name: Optional[str] = None,
    actor_role: Optional[str] = None,
) -> TransitionResult:
    target = get_status(target_status)
    if target is None or not target.is_active:
        return TransitionResult.rejected(UNKNOWN_STATUS)

    if current_status is not None and str(current_status) == target.code:
        return TransitionResult.rejected(STATUS_UNCHANGED)

    if target.requires_driver_on_entry and not is_driver_assigned(driver_name):
        return TransitionResult.rejected(DRIVER_REQUIRED)

    if actor_role is not None and actor_role not in target.allowed_setter_roles:
        return TransitionResult.rejected(ROLE_NOT_PERMITTED)

    return TransitionResult.ok()
