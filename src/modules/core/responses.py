"""Translation of domain errors into API responses."""

from __future__ import annotations

from typing import Any, Dict

from rest_framework.response import Response

from shared.domain.exceptions import DomainError


def error_response(exc: DomainError, status_code: int) -> Response:
    """``{"detail", "code"}`` plus the offending ``order_id`` when known."""
    body: Dict[str, Any] = {"detail": exc.message, "code": exc.code}
    order_id = exc.details.get("order_id")
    if order_id is not None:
        body["order_id"] = str(order_id)
    return Response(body, status=status_code)
