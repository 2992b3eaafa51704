# sales/views/exchange.py

from drf_spectacular.utils import extend_schema
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from sales.models import ReturnReasonCode, SaleReturn
from sales.serializers import (
    ExchangeCommandSerializer,
    ExchangePreviewCommandSerializer,
    ExchangePreviewSerializer,
    ExchangeReadSerializer,
    ReturnReasonCodeSerializer,
)
from sales.services.exchange_errors import (
    ExchangeConflictError,
    ExchangeError,
    ExchangeNotFoundError,
    ExchangePersistenceError,
    ExchangeValidationError,
)
from sales.services.exchange_orchestrator import preview_exchange, process_exchange
from sales.views.errors import error_response

EXCHANGE_ERROR_STATUS = (
    (ExchangeValidationError, status.HTTP_400_BAD_REQUEST),
    (ExchangeNotFoundError, status.HTTP_404_NOT_FOUND),
    (ExchangeConflictError, status.HTTP_409_CONFLICT),
    (ExchangePersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def exchange_error_response(exc: ExchangeError):
    http_status = status.HTTP_400_BAD_REQUEST
    for error_class, mapped in EXCHANGE_ERROR_STATUS:
        if isinstance(exc, error_class):
            http_status = mapped
            break

    return error_response(
        code=exc.code,
        message=str(exc),
        http_status=http_status,
        retryable=exc.retryable,
    )


# ======================================================
# EXCHANGES (EXECUTE + PREVIEW + READ)
# ======================================================

class ExchangeViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    POS exchanges.

    - create:    execute an exchange (atomic)
    - calculate: preview totals, nothing written
    - list/retrieve: exchange history
    """

    queryset = (
        SaleReturn.objects.filter(is_exchange=True)
        .select_related("original_sale", "exchange_sale", "processed_by")
        .prefetch_related("items", "items__sale_item", "items__reason_code")
    )
    serializer_class = ExchangeReadSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "return_type", "original_sale", "exchange_sale"]

    def get_serializer_class(self):
        if self.action == "create":
            return ExchangeCommandSerializer
        if self.action == "calculate":
            return ExchangePreviewCommandSerializer
        return ExchangeReadSerializer

    @extend_schema(
        request=ExchangeCommandSerializer,
        responses={201: ExchangeReadSerializer, 200: ExchangeReadSerializer},
    )
    def create(self, request, *args, **kwargs):
        """
        Execute an exchange.

        201: created. 200: idempotent replay of an already-committed exchange
        (same idempotency_key, from the body or the Idempotency-Key header).
        """
        command = ExchangeCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        idempotency_key = data.get("idempotency_key") or request.headers.get(
            "Idempotency-Key"
        )

        try:
            result = process_exchange(
                original_sale_id=data["original_sale_id"],
                return_items=[dict(line) for line in data["return_items"]],
                new_items=[dict(line) for line in data["new_items"]],
                user=request.user,
                payment_method=data.get("payment_method"),
                payment_details=dict(data.get("payment_details") or {}),
                difference_method=data.get("difference_method"),
                shift_id=data.get("shift_id"),
                notes=data.get("notes", ""),
                idempotency_key=idempotency_key,
            )
        except ExchangeError as exc:
            return exchange_error_response(exc)

        sale_return = self.get_queryset().get(pk=result.sale_return.pk)
        return Response(
            ExchangeReadSerializer(sale_return).data,
            status=status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED,
        )

    @extend_schema(
        request=ExchangePreviewCommandSerializer,
        responses={200: ExchangePreviewSerializer},
    )
    @action(detail=False, methods=["post"], url_path="calculate")
    def calculate(self, request):
        """Preview the financial outcome of an exchange without writing."""
        command = ExchangePreviewCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            plan = preview_exchange(
                original_sale_id=data["original_sale_id"],
                return_items=[dict(line) for line in data["return_items"]],
                new_items=[dict(line) for line in data["new_items"]],
                difference_method=data.get("difference_method"),
            )
        except ExchangeError as exc:
            return exchange_error_response(exc)

        return Response(ExchangePreviewSerializer(plan).data, status=status.HTTP_200_OK)


class ReturnReasonCodeListView(generics.ListAPIView):
    queryset = ReturnReasonCode.objects.filter(is_active=True)
    serializer_class = ReturnReasonCodeSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None
