"""Settlements API views.

Exposes ``SettlementService`` via HTTP with the same error mapping as
the return slips: unknown ids → 404, batch conflicts → 409.
"""

from __future__ import annotations

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
from modules.settlements.dtos import (
    CreateDriverPaymentSlipDTO,
    CreateMerchantPaymentSlipDTO,
)
from modules.settlements.filters import (
    DriverPaymentSlipFilter,
    MerchantPaymentSlipFilter,
)
from modules.settlements.models import DriverPaymentSlip, MerchantPaymentSlip
from modules.settlements.repositories.django_repository import (
    DriverPaymentSlipDjangoRepository,
    MerchantPaymentSlipDjangoRepository,
)
from modules.settlements.serializers import (
    CreateDriverPaymentSlipSerializer,
    CreateMerchantPaymentSlipSerializer,
    DriverPaymentSlipSerializer,
    MerchantPaymentSlipSerializer,
)
from modules.settlements.services import SettlementService

_BATCH_CONFLICTS = (OrderAlreadyClaimed, OrderNotOwnedByParty, OrderNotEligible)


class _PaymentSlipViewSet(GenericViewSet):
    filter_backends = [DjangoFilterBackend]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = SettlementService(
            order_repository=OrderDjangoRepository(),
            driver_payment_repository=DriverPaymentSlipDjangoRepository(),
            merchant_payment_repository=MerchantPaymentSlipDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        if self.action in {"create", "pay"}:
            self.throttle_scope = "slip_creation"
        else:
            self.throttle_scope = None
        return super().get_throttles()

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = self.get_serializer_class()(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def _create(self, request: Request, input_serializer, dto_class, create, get):
        serializer = input_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = dto_class(**serializer.validated_data)
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors()[0]["msg"], "code": "validation_error"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            slip = create(dto)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except _BATCH_CONFLICTS as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)

        output = self.get_serializer_class()(get(slip.id))
        return Response(output.data, status=status.HTTP_201_CREATED)

    def _retrieve(self, pk: str | None, get) -> Response:
        try:
            slip = get(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(self.get_serializer_class()(slip).data)

    @staticmethod
    def _required_param(request: Request, name: str) -> str | None:
        value = (request.query_params.get(name) or "").strip()
        return value or None

    @staticmethod
    def _missing_param(name: str) -> Response:
        return Response(
            {"detail": f"Query parameter '{name}' is required.", "code": "validation_error"},
            status=status.HTTP_400_BAD_REQUEST,
        )


class DriverPaymentSlipViewSet(_PaymentSlipViewSet):
    """Cash handed in by drivers."""

    queryset = DriverPaymentSlip.objects.prefetch_related("entries").order_by(
        "-created_at"
    )
    serializer_class = DriverPaymentSlipSerializer
    filterset_class = DriverPaymentSlipFilter

    def create(self, request: Request) -> Response:
        """POST /api/v1/settlements/driver-payments/"""
        return self._create(
            request,
            CreateDriverPaymentSlipSerializer,
            CreateDriverPaymentSlipDTO,
            self._service.create_driver_payment_slip,
            self._service.get_driver_payment_slip,
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/settlements/driver-payments/{pk}/"""
        return self._retrieve(pk, self._service.get_driver_payment_slip)

    @action(detail=False, methods=["get"])
    def candidates(self, request: Request) -> Response:
        """GET /api/v1/settlements/driver-payments/candidates/?driver_name=..."""
        driver_name = self._required_param(request, "driver_name")
        if driver_name is None:
            return self._missing_param("driver_name")
        orders = self._service.list_driver_payment_candidates(driver_name)
        return Response(OrderListSerializer(orders, many=True).data)


class MerchantPaymentSlipViewSet(_PaymentSlipViewSet):
    """Cash paid out to merchants."""

    queryset = MerchantPaymentSlip.objects.prefetch_related("entries").order_by(
        "-created_at"
    )
    serializer_class = MerchantPaymentSlipSerializer
    filterset_class = MerchantPaymentSlipFilter

    def create(self, request: Request) -> Response:
        """POST /api/v1/settlements/merchant-payments/"""
        return self._create(
            request,
            CreateMerchantPaymentSlipSerializer,
            CreateMerchantPaymentSlipDTO,
            self._service.create_merchant_payment_slip,
            self._service.get_merchant_payment_slip,
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/settlements/merchant-payments/{pk}/"""
        return self._retrieve(pk, self._service.get_merchant_payment_slip)

    @action(detail=True, methods=["post"])
    def pay(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/settlements/merchant-payments/{pk}/pay/"""
        try:
            self._service.mark_merchant_payment_paid(pk)
            slip = self._service.get_merchant_payment_slip(pk)
        except SlipNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(MerchantPaymentSlipSerializer(slip).data)

    @action(detail=False, methods=["get"])
    def candidates(self, request: Request) -> Response:
        """GET /api/v1/settlements/merchant-payments/candidates/?merchant_name=..."""
        merchant_name = self._required_param(request, "merchant_name")
        if merchant_name is None:
            return self._missing_param("merchant_name")
        orders = self._service.list_merchant_payment_candidates(merchant_name)
        return Response(OrderListSerializer(orders, many=True).data)
