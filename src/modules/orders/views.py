"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; generic exceptions propagate.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet, ViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import error_response
from modules.orders.dtos import (
    BulkStatusUpdateDTO,
    CreateOrderDTO,
    UpdateOrderStatusDTO,
)
from modules.orders.exceptions import (
    InvalidOrderField,
    InvalidOrderStatus,
    OrderNotFound,
    ProtectedOrderField,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    BulkStatusUpdateSerializer,
    CreateOrderSerializer,
    DriverPresenceSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderTotalsSerializer,
    StatusDefinitionSerializer,
    UpdateOrderFieldSerializer,
    UpdateOrderStatusSerializer,
    ValidateTransitionSerializer,
)
from modules.orders.services import OrderService
from modules.orders.statuses import active_statuses, all_statuses
from modules.orders.totals import compute_totals
from modules.orders.transitions import validate_transition
from shared.infrastructure.realtime import publish_driver_status


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with an injected repository (DIP).
    Does **not** extend ``ModelViewSet``: every mutation goes through
    the service layer.
    """

    queryset = Order.objects.all()
    filterset_class = OrderFilter
    ordering_fields = ["order_number", "date", "created_at", "cod", "status"]
    ordering = ["-order_number"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(order_repository=OrderDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "totals"}:
            throttle_scope = "order_listing"
        elif self.action in {"set_status", "bulk_status", "set_field"}:
            throttle_scope = "order_mutation"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = CreateOrderDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors()[0]["msg"], "code": "validation_error"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        order = self._service.create_order(dto)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve / Totals
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, driver, merchant, date range, search) is
        handled by ``OrderFilter``.  Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def totals(self, request: Request) -> Response:
        """GET /api/v1/orders/totals/ (same filters as the list)"""
        queryset = self.filter_queryset(self.get_queryset())
        figures = compute_totals(queryset).as_dict(rounded=True)
        return Response(OrderTotalsSerializer(figures).data)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status", url_name="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/status/"""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderStatusDTO(**serializer.validated_data)

        try:
            order = self._service.update_order_status(
                pk,
                dto.status,
                dto.driver_name,
                actor_role=dto.actor_role,
                notes=dto.notes,
            )
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return error_response(exc, status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["post"], url_path="bulk-status", url_name="bulk-status")
    def bulk_status(self, request: Request) -> Response:
        """POST /api/v1/orders/bulk-status/ (all or nothing)"""
        serializer = BulkStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = BulkStatusUpdateDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors()[0]["msg"], "code": "validation_error"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            orders = self._service.bulk_update_status(
                dto.order_ids,
                dto.status,
                dto.driver_name,
                actor_role=dto.actor_role,
                notes=dto.notes,
            )
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return error_response(exc, status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "count": len(orders),
                "results": OrderListSerializer(orders, many=True).data,
            }
        )

    @action(detail=True, methods=["post"], url_path="field", url_name="field")
    def set_field(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/field/ (direct edit, no transition)"""
        serializer = UpdateOrderFieldSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = self._service.update_order_field(pk, data["field"], data["value"])
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except (ProtectedOrderField, InvalidOrderField) as exc:
            return error_response(exc, status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(order).data)


class StatusViewSet(ViewSet):
    """Read-only Status Registry plus a dry-run of the Transition Validator."""

    def list(self, request: Request) -> Response:
        """GET /api/v1/statuses/ (``?include_inactive=true`` lists every code)."""
        include_inactive = request.query_params.get("include_inactive") in {
            "1",
            "true",
            "True",
        }
        statuses = all_statuses() if include_inactive else active_statuses()
        return Response(StatusDefinitionSerializer(statuses, many=True).data)

    @action(detail=False, methods=["post"])
    def validate(self, request: Request) -> Response:
        """POST /api/v1/statuses/validate/ (dry run)"""
        serializer = ValidateTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = validate_transition(
            data["current_status"],
            data["target_status"],
            data["driver_name"],
            data["actor_role"],
        )
        return Response({"valid": result.valid, "error": result.error, "code": result.code})


class DriverPresenceView(APIView):
    """POST /api/v1/drivers/{driver_id}/presence/"""

    def post(self, request: Request, driver_id: str) -> Response:
        serializer = DriverPresenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        is_online = serializer.validated_data["is_online"]

        publish_driver_status(driver_id, is_online)
        return Response(
            {"driverId": driver_id, "isOnline": is_online},
            status=status.HTTP_202_ACCEPTED,
        )
