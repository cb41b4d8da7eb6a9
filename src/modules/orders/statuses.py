"""Status Registry.

The authoritative metadata for every ``OrderStatus`` code: display
name, icon, colour, whether it is active, whether entering it requires
an assigned driver, which roles may set it, and whether it marks a
parcel coming back from a driver.  Adding a new driver-bound status is a
registry change only; the validator reads the flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from modules.orders.constants import OrderStatus, SetterRole

_ADMIN = SetterRole.ADMIN.value
_SUPERVISOR = SetterRole.SUPERVISOR.value
_DRIVER = SetterRole.DRIVER.value
_MERCHANT = SetterRole.MERCHANT.value


@dataclass(frozen=True)
class StatusDefinition:
    code: str
    display_name: str
    icon: str
    color: str
    is_active: bool = True
    requires_driver_on_entry: bool = False
    allowed_setter_roles: FrozenSet[str] = field(default_factory=frozenset)
    creates_return_task: bool = False
    is_final: bool = False


def _define(
    status: OrderStatus,
    icon: str,
    color: str,
    roles: tuple[str, ...],
    **flags: bool,
) -> StatusDefinition:
    return StatusDefinition(
        code=status.value,
        display_name=status.label,
        icon=icon,
        color=color,
        allowed_setter_roles=frozenset(roles),
        **flags,
    )


STATUS_REGISTRY: Dict[str, StatusDefinition] = {
    d.code: d
    for d in (
        _define(OrderStatus.PENDING, "Clock", "#607D8B", (_ADMIN, _MERCHANT)),
        _define(
            OrderStatus.AWAITING_DRIVER,
            "UserClock",
            "#0288D1",
            (_ADMIN, _SUPERVISOR),
            requires_driver_on_entry=True,
        ),
        _define(
            OrderStatus.OUT_FOR_DELIVERY,
            "Truck",
            "#1976D2",
            (_ADMIN, _DRIVER),
            requires_driver_on_entry=True,
        ),
        _define(
            OrderStatus.DELIVERED,
            "PackageCheck",
            "#2E7D32",
            (_DRIVER, _ADMIN),
            is_final=True,
        ),
        _define(OrderStatus.POSTPONED, "CalendarClock", "#F9A825", (_DRIVER, _ADMIN)),
        _define(
            OrderStatus.RETURNED,
            "Undo2",
            "#8E24AA",
            (_DRIVER, _ADMIN),
            creates_return_task=True,
        ),
        _define(
            OrderStatus.CANCELLED,
            "XCircle",
            "#D32F2F",
            (_ADMIN, _MERCHANT),
            creates_return_task=True,
        ),
        _define(
            OrderStatus.MONEY_RECEIVED, "HandCoins", "#004D40", (_ADMIN, _SUPERVISOR)
        ),
        _define(
            OrderStatus.MERCHANT_SETTLED,
            "Wallet",
            "#00695C",
            (_ADMIN, _SUPERVISOR),
            is_final=True,
        ),
        _define(OrderStatus.COMPLETED, "CheckCheck", "#1B5E20", (_ADMIN,), is_final=True),
        _define(
            OrderStatus.EXCHANGE,
            "Repeat",
            "#FB923C",
            (_DRIVER, _ADMIN),
            creates_return_task=True,
        ),
        _define(
            OrderStatus.REFUSED_PAID,
            "ThumbsDown",
            "#EF4444",
            (_DRIVER, _ADMIN),
            creates_return_task=True,
        ),
        _define(
            OrderStatus.REFUSED_UNPAID,
            "Ban",
            "#B91C1C",
            (_DRIVER, _ADMIN),
            creates_return_task=True,
        ),
        _define(OrderStatus.BRANCH_RETURNED, "Building", "#7E22CE", (_ADMIN,)),
        _define(
            OrderStatus.MERCHANT_RETURNED, "Undo2", "#581C87", (_ADMIN,), is_final=True
        ),
        _define(
            OrderStatus.ARCHIVED,
            "Archive",
            "#4B5563",
            (_ADMIN,),
            is_active=False,
            is_final=True,
        ),
        _define(OrderStatus.NO_ANSWER, "PhoneOff", "#F59E0B", (_DRIVER, _ADMIN)),
        _define(
            OrderStatus.ARRIVAL_NO_ANSWER,
            "UserX",
            "#E11D48",
            (_DRIVER, _ADMIN),
            creates_return_task=True,
        ),
    )
}


def get_status(code: Optional[str]) -> Optional[StatusDefinition]:
    if not code:
        return None
    return STATUS_REGISTRY.get(str(code))


def all_statuses() -> List[StatusDefinition]:
    return list(STATUS_REGISTRY.values())


def active_statuses() -> List[StatusDefinition]:
    return [s for s in STATUS_REGISTRY.values() if s.is_active]


def requires_driver(code: Optional[str]) -> bool:
    status = get_status(code)
    return bool(status and status.requires_driver_on_entry)


def is_driver_return(code: Optional[str]) -> bool:
    """True for statuses a driver reports when bringing a parcel back."""
    status = get_status(code)
    return bool(status and status.creates_return_task)


def driver_return_codes() -> List[str]:
    return [s.code for s in STATUS_REGISTRY.values() if s.creates_return_task]


def display_name(code: Optional[str]) -> str:
    status = get_status(code)
    if status is None:
        return code or ""
    return status.display_name
