"""Financial Totals Calculator.

Sums are exact ``Decimal`` arithmetic; rounding to two places happens
only through ``OrderTotals.rounded()`` at display time so repeated
additions never compound rounding error.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable

ZERO = Decimal("0")
CENT = Decimal("0.01")


def _amount(obj: Any, name: str) -> Decimal:
    value = getattr(obj, name, None)
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class OrderTotals:
    """Aggregate money figures over a set of orders.

    - ``item_price``: owed to merchants for goods.
    - ``delivery_fee``: delivery fees plus additional costs.
    - ``cod``: cash to collect from recipients.
    - ``driver_fee``: driver fees plus additional fares.
    - ``additional_cost``: additional costs alone (also inside ``delivery_fee``).
    - ``company_due``: ``cod - item_price - driver_fee``.
    """

    item_price: Decimal = ZERO
    delivery_fee: Decimal = ZERO
    cod: Decimal = ZERO
    driver_fee: Decimal = ZERO
    additional_cost: Decimal = ZERO
    order_count: int = 0

    @property
    def company_due(self) -> Decimal:
        return self.cod - self.item_price - self.driver_fee

    def __add__(self, other: OrderTotals) -> OrderTotals:
        if not isinstance(other, OrderTotals):
            return NotImplemented
        return OrderTotals(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def rounded(self) -> OrderTotals:
        return OrderTotals(
            item_price=_round(self.item_price),
            delivery_fee=_round(self.delivery_fee),
            cod=_round(self.cod),
            driver_fee=_round(self.driver_fee),
            additional_cost=_round(self.additional_cost),
            order_count=self.order_count,
        )

    def as_dict(self, rounded: bool = False) -> Dict[str, Any]:
        """Plain mapping including ``company_due``.

        With ``rounded=True`` every figure, ``company_due`` included, is
        derived from the exact sums and then rounded independently.
        """
        data = asdict(self)
        data["company_due"] = self.company_due
        if rounded:
            data = {
                key: _round(value) if isinstance(value, Decimal) else value
                for key, value in data.items()
            }
        return data


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(orders: Iterable[Any]) -> OrderTotals:
    """Total over any iterable of order-like objects; never raises on empty input."""
    item_price = delivery_fee = cod = driver_fee = additional_cost = ZERO
    count = 0
    for order in orders:
        additional = _amount(order, "additional_cost")
        item_price += _amount(order, "item_price")
        delivery_fee += _amount(order, "delivery_fee") + additional
        cod += _amount(order, "cod")
        driver_fee += _amount(order, "driver_fee") + _amount(
            order, "driver_additional_fare"
        )
        additional_cost += additional
        count += 1
    return OrderTotals(
        item_price=item_price,
        delivery_fee=delivery_fee,
        cod=cod,
        driver_fee=driver_fee,
        additional_cost=additional_cost,
        order_count=count,
    )


def slip_total(entries: Iterable[Any]) -> Decimal:
    """Sum of the item prices snapshotted on a slip's entries."""
    return sum((_amount(entry, "item_price") for entry in entries), ZERO)
