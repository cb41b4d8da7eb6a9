"""Request tracing for the dispatch API.

Every request carries a request id from the ``X-Request-ID`` header
(dispatch screens and the socket gateway forward theirs) or a fresh
UUID4.  The id is bound into structlog's context so slip creation,
status transitions and relay publishes can be joined back to the HTTP
call that caused them, and echoed on the response.
"""

import re
import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids are echoed into logs and headers; anything else is replaced.
_ACCEPTED_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")

logger = structlog.get_logger(__name__)


def resolve_request_id(raw: str | None) -> str:
    if raw and _ACCEPTED_REQUEST_ID.fullmatch(raw):
        return raw
    return str(uuid.uuid4())


class RequestIdMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = resolve_request_id(request.META.get("HTTP_X_REQUEST_ID"))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=request_id)

        started = time.monotonic()
        logger.info("http.request", method=request.method, path=request.path)

        response = self.get_response(request)

        logger.info(
            "http.response",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        response[REQUEST_ID_HEADER] = request_id
        return response
