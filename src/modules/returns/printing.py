"""Printable slip documents.

``build_slip_document`` turns a slip's snapshot entries into a fully
populated, deterministic table (entries in position order, one total
row).  ``SlipPrinter`` renders it to HTML and hands it to a rendering
backend for the PDF.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple, Union

from django.conf import settings
from django.template.loader import render_to_string

from modules.orders.totals import slip_total
from modules.returns.models import DriverSlip, MerchantSlip
from modules.returns.renderers import ISlipRenderer, get_default_renderer

AnySlip = Union[DriverSlip, MerchantSlip]


@dataclass(frozen=True)
class SlipLine:
    index: int
    order_id: str
    order_number: int
    recipient_phone: str
    address: str
    return_reason: str
    item_price: Decimal


@dataclass(frozen=True)
class SlipDocument:
    title: str
    reference: str
    party_label: str
    party_name: str
    date: str
    status: Optional[str]
    lines: Tuple[SlipLine, ...]
    total: Decimal

    @property
    def item_count(self) -> int:
        return len(self.lines)


def _join(*parts: str) -> str:
    return " - ".join(p for p in parts if p)


def build_slip_document(slip: AnySlip) -> SlipDocument:
    entries = slip.ordered_entries
    lines = tuple(
        SlipLine(
            index=index,
            order_id=str(entry.order_id),
            order_number=entry.order_number,
            recipient_phone=_join(entry.recipient, entry.phone),
            address=_join(entry.city, entry.address),
            return_reason=entry.return_reason,
            item_price=entry.item_price,
        )
        for index, entry in enumerate(entries, start=1)
    )

    if isinstance(slip, MerchantSlip):
        title, party_label = "كشف إرجاع للتاجر", "التاجر"
        status = slip.get_status_display()
    else:
        title, party_label = "كشف استلام مرتجعات من السائق", "السائق"
        status = None

    return SlipDocument(
        title=title,
        reference=slip.reference,
        party_label=party_label,
        party_name=slip.party_name,
        date=slip.date.isoformat(),
        status=status,
        lines=lines,
        total=slip_total(entries),
    )


class SlipPrinter:
    template_name = "returns/slip.html"

    def __init__(
        self,
        renderer: Optional[ISlipRenderer] = None,
        width_mm: Optional[float] = None,
        height_mm: Optional[float] = None,
    ) -> None:
        self._renderer = renderer or get_default_renderer()
        self._width_mm = width_mm or settings.SLIP_PAGE_WIDTH_MM
        self._height_mm = height_mm or settings.SLIP_PAGE_HEIGHT_MM

    def render_html(self, slip: AnySlip) -> str:
        return render_to_string(self.template_name, {"doc": build_slip_document(slip)})

    def render_pdf(self, slip: AnySlip) -> bytes:
        return self._renderer.render(
            self.render_html(slip), self._width_mm, self._height_mm
        )
