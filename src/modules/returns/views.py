"""Returns API views.

Exposes ``ReturnsService`` via HTTP.  Domain exceptions are caught and
translated: unknown ids → 404, batch conflicts → 409, rendering
failures → 502.
"""

from __future__ import annotations

from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import (
    OrderAlreadyClaimed,
    OrderNotEligible,
    OrderNotOwnedByParty,
    SlipNotFound,
)
from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import error_response
from modules.orders.exceptions import OrderNotFound
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer
from modules.returns.dtos import CreateDriverSlipDTO, CreateMerchantSlipDTO
from modules.returns.exceptions import SlipRenderingFailed
from modules.returns.filters import DriverSlipFilter, MerchantSlipFilter
from modules.returns.models import DriverSlip, MerchantSlip
from modules.returns.printing import SlipPrinter
from modules.returns.repositories.django_repository import (
    DriverSlipDjangoRepository,
    MerchantSlipDjangoRepository,
)
from modules.returns.serializers import (
    CreateDriverSlipSerializer,
    CreateMerchantSlipSerializer,
    DriverSlipSerializer,
    MerchantSlipSerializer,
)
from modules.returns.services import ReturnsService

_BATCH_CONFLICTS = (OrderAlreadyClaimed, OrderNotOwnedByParty, OrderNotEligible)


class _SlipViewSet(GenericViewSet):
    """Wiring shared by both slip endpoints."""

    filter_backends = [DjangoFilterBackend]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ReturnsService(
            order_repository=OrderDjangoRepository(),
            driver_slip_repository=DriverSlipDjangoRepository(),
            merchant_slip_repository=MerchantSlipDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        if self.action in {"create", "deliver"}:
            self.throttle_scope = "slip_creation"
        elif self.action == "pdf":
            self.throttle_scope = "slip_printing"
        else:
            self.throttle_scope = None
        return super().get_throttles()

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = self.get_serializer_class()(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def _pdf_response(self, slip) -> Response | HttpResponse:
        try:
            pdf = SlipPrinter().render_pdf(slip)
        except SlipRenderingFailed as exc:
            return error_response(exc, status.HTTP_502_BAD_GATEWAY)
        response = HttpResponse(pdf, content_type="application/pdf")
        response["Content-Disposition"] = f'inline; filename="{slip.reference}.pdf"'
        return response

    @staticmethod
    def _dto_error(exc: PydanticValidationError) -> Response:
        return Response(
            {"detail": exc.errors()[0]["msg"], "code": "validation_error"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    @staticmethod
    def _party_param(request: Request, name: str) -> str | None:
        value = (request.query_params.get(name) or "").strip()
        return value or None


class DriverSlipViewSet(_SlipViewSet):
    """Driver → branch slips."""

    queryset = DriverSlip.objects.prefetch_related("entries").order_by("-created_at")
    serializer_class = DriverSlipSerializer
    filterset_class = DriverSlipFilter

    def create(self, request: Request) -> Response:
        """POST /api/v1/returns/driver-slips/"""
        serializer = CreateDriverSlipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CreateDriverSlipDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return self._dto_error(exc)

        try:
            slip = self._service.create_driver_slip(dto)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except _BATCH_CONFLICTS as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)

        slip = self._service.get_driver_slip(slip.id)
        return Response(DriverSlipSerializer(slip).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/returns/driver-slips/{pk}/"""
        try:
            slip = self._service.get_driver_slip(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(DriverSlipSerializer(slip).data)

    @action(detail=True, methods=["get"])
    def pdf(self, request: Request, pk: str | None = None):
        """GET /api/v1/returns/driver-slips/{pk}/pdf/"""
        try:
            slip = self._service.get_driver_slip(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return self._pdf_response(slip)

    @action(detail=False, methods=["get"])
    def candidates(self, request: Request) -> Response:
        """GET /api/v1/returns/driver-slips/candidates/?driver_name=..."""
        driver_name = self._party_param(request, "driver_name")
        if driver_name is None:
            return Response(
                {"detail": "Query parameter 'driver_name' is required.", "code": "validation_error"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        orders = self._service.list_driver_return_candidates(driver_name)
        return Response(OrderListSerializer(orders, many=True).data)


class MerchantSlipViewSet(_SlipViewSet):
    """Branch → merchant slips."""

    queryset = MerchantSlip.objects.prefetch_related("entries").order_by("-created_at")
    serializer_class = MerchantSlipSerializer
    filterset_class = MerchantSlipFilter

    def create(self, request: Request) -> Response:
        """POST /api/v1/returns/merchant-slips/"""
        serializer = CreateMerchantSlipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CreateMerchantSlipDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return self._dto_error(exc)

        try:
            slip = self._service.create_merchant_slip(dto)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except _BATCH_CONFLICTS as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)

        slip = self._service.get_merchant_slip(slip.id)
        return Response(MerchantSlipSerializer(slip).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/returns/merchant-slips/{pk}/"""
        try:
            slip = self._service.get_merchant_slip(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(MerchantSlipSerializer(slip).data)

    @action(detail=True, methods=["post"])
    def deliver(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/returns/merchant-slips/{pk}/deliver/"""
        try:
            self._service.mark_merchant_slip_delivered(pk)
            slip = self._service.get_merchant_slip(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(MerchantSlipSerializer(slip).data)

    @action(detail=True, methods=["get"])
    def pdf(self, request: Request, pk: str | None = None):
        """GET /api/v1/returns/merchant-slips/{pk}/pdf/"""
        try:
            slip = self._service.get_merchant_slip(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return self._pdf_response(slip)

    @action(detail=False, methods=["get"])
    def candidates(self, request: Request) -> Response:
        """GET /api/v1/returns/merchant-slips/candidates/?merchant_name=..."""
        merchant_name = self._party_param(request, "merchant_name")
        if merchant_name is None:
            return Response(
                {"detail": "Query parameter 'merchant_name' is required.", "code": "validation_error"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        orders = self._service.list_branch_return_candidates(merchant_name)
        return Response(OrderListSerializer(orders, many=True).data)
