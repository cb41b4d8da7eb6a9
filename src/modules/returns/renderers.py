"""PDF rendering backends.

The rendering engine itself lives outside this service; it is consumed
through ``render(html, width_mm, height_mm) -> bytes``.
"""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
import structlog
from django.conf import settings

from modules.returns.exceptions import SlipRenderingFailed

logger = structlog.get_logger(__name__)


class ISlipRenderer(Protocol):
    def render(self, html: str, width_mm: float, height_mm: float) -> bytes: ...


class HttpRenderingBackend:
    """Posts the HTML to a rendering service and returns the PDF body.

    No retries: the caller sees ``SlipRenderingFailed`` and may ask again.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    def render(self, html: str, width_mm: float, height_mm: float) -> bytes:
        if not self._url:
            raise SlipRenderingFailed("Slip renderer is not configured.")

        payload = {"html": html, "widthMm": width_mm, "heightMm": height_mm}
        log = logger.bind(renderer_url=self._url, html_length=len(html))
        try:
            if self._client is not None:
                response = self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                response = httpx.post(self._url, json=payload, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.error("returns.render_rejected", status_code=exc.response.status_code)
            raise SlipRenderingFailed(
                f"Renderer responded with HTTP {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            log.error("returns.render_unreachable", error=str(exc))
            raise SlipRenderingFailed("Renderer is unreachable.") from exc

        if not response.content:
            log.error("returns.render_empty")
            raise SlipRenderingFailed("Renderer returned an empty document.")

        log.info("returns.rendered", pdf_bytes=len(response.content))
        return response.content


def get_default_renderer() -> HttpRenderingBackend:
    return HttpRenderingBackend(
        url=settings.SLIP_RENDERER_URL,
        timeout=settings.SLIP_RENDERER_TIMEOUT,
    )
