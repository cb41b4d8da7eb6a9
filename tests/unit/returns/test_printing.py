"""Unit tests for slip documents, HTML rendering and the PDF backend."""

from __future__ import annotations

import json
from decimal import Decimal

import httpx
import pytest

from modules.orders.constants import OrderStatus
from modules.returns.dtos import CreateDriverSlipDTO, CreateMerchantSlipDTO
from modules.returns.exceptions import SlipRenderingFailed
from modules.returns.printing import SlipPrinter, build_slip_document
from modules.returns.renderers import HttpRenderingBackend, get_default_renderer

pytestmark = pytest.mark.unit


class FakeRenderer:
    def __init__(self) -> None:
        self.calls = []

    def render(self, html: str, width_mm: float, height_mm: float) -> bytes:
        self.calls.append((html, width_mm, height_mm))
        return b"%PDF-1.7 fake"


@pytest.fixture()
def driver_slip(returns_service, make_order):
    orders = [
        make_order(status=OrderStatus.RETURNED, driver="A", item_price=Decimal("12.50"), phone="0790000001"),
        make_order(status=OrderStatus.REFUSED_PAID, driver="A", item_price=Decimal("7.25"), city="", address="بلا مدينة"),
    ]
    return returns_service.create_driver_slip(
        CreateDriverSlipDTO(driver_name="A", order_ids=[o.id for o in orders])
    )


@pytest.fixture()
def merchant_slip(returns_service, make_order):
    order = make_order(status=OrderStatus.BRANCH_RETURNED, previous_status=OrderStatus.CANCELLED)
    return returns_service.create_merchant_slip(
        CreateMerchantSlipDTO(merchant_name="متجر الأمل", order_ids=[order.id])
    )


class TestSlipDocument:
    def test_driver_slip_lines(self, driver_slip):
        doc = build_slip_document(driver_slip)

        assert doc.reference == driver_slip.reference
        assert doc.party_label == "السائق"
        assert doc.party_name == "A"
        assert doc.status is None
        assert [line.index for line in doc.lines] == [1, 2]
        assert doc.lines[0].recipient_phone == "سارة - 0790000001"
        assert doc.lines[0].address == "عمان - شارع الجامعة"
        assert doc.lines[0].return_reason == "مرتجع"
        assert doc.lines[1].address == "بلا مدينة"
        assert doc.total == Decimal("19.75")
        assert doc.item_count == 2

    def test_merchant_slip_carries_status(self, merchant_slip):
        doc = build_slip_document(merchant_slip)
        assert doc.party_label == "التاجر"
        assert doc.status == merchant_slip.get_status_display()
        assert doc.lines[0].return_reason == "ملغي"

    def test_document_is_deterministic(self, driver_slip):
        assert build_slip_document(driver_slip) == build_slip_document(driver_slip)


class TestSlipPrinter:
    def test_html_contains_every_line_and_total(self, driver_slip):
        html = SlipPrinter(renderer=FakeRenderer()).render_html(driver_slip)
        assert 'dir="rtl"' in html
        assert driver_slip.reference in html
        assert "12.50" in html
        assert "19.75" in html

    def test_pdf_goes_through_renderer_with_page_size(self, driver_slip):
        renderer = FakeRenderer()
        pdf = SlipPrinter(renderer=renderer, width_mm=80, height_mm=200).render_pdf(driver_slip)

        assert pdf.startswith(b"%PDF")
        html, width, height = renderer.calls[0]
        assert driver_slip.reference in html
        assert (width, height) == (80, 200)

    def test_page_size_defaults_from_settings(self, driver_slip, settings):
        settings.SLIP_PAGE_WIDTH_MM = 100.0
        settings.SLIP_PAGE_HEIGHT_MM = 150.0
        renderer = FakeRenderer()
        SlipPrinter(renderer=renderer).render_pdf(driver_slip)
        assert renderer.calls[0][1:] == (100.0, 150.0)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpRenderingBackend:
    def test_posts_html_and_page_size(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"%PDF-1.7")

        backend = HttpRenderingBackend("http://renderer.test/render", client=_client(handler))
        assert backend.render("<html></html>", 210, 297) == b"%PDF-1.7"
        assert seen["url"] == "http://renderer.test/render"
        assert seen["body"] == {"html": "<html></html>", "widthMm": 210, "heightMm": 297}

    def test_error_status_is_wrapped(self):
        backend = HttpRenderingBackend(
            "http://renderer.test/render",
            client=_client(lambda request: httpx.Response(500)),
        )
        with pytest.raises(SlipRenderingFailed, match="HTTP 500"):
            backend.render("<html></html>", 210, 297)

    def test_unreachable_renderer_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        backend = HttpRenderingBackend("http://renderer.test/render", client=_client(handler))
        with pytest.raises(SlipRenderingFailed) as exc_info:
            backend.render("<html></html>", 210, 297)
        assert exc_info.value.code == "slip_rendering_failed"

    def test_empty_body_is_a_failure(self):
        backend = HttpRenderingBackend(
            "http://renderer.test/render",
            client=_client(lambda request: httpx.Response(200, content=b"")),
        )
        with pytest.raises(SlipRenderingFailed):
            backend.render("<html></html>", 210, 297)

    def test_unconfigured_url_fails_fast(self):
        with pytest.raises(SlipRenderingFailed):
            HttpRenderingBackend("").render("<html></html>", 210, 297)

    def test_default_renderer_reads_settings(self, settings):
        settings.SLIP_RENDERER_URL = "http://elsewhere.test/pdf"
        settings.SLIP_RENDERER_TIMEOUT = 3.0
        backend = get_default_renderer()
        assert backend._url == "http://elsewhere.test/pdf"
        assert backend._timeout == 3.0
