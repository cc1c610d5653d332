# inventory/views/stock.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from inventory.models import StockLevel, StockMovement, StockReservation
from inventory.serializers import (
    ReceiptInputSerializer,
    StockLevelSerializer,
    StockMovementSerializer,
    StockReservationSerializer,
)
from inventory.services.exceptions import InventoryError
from inventory.services.intake import receive_stock
from permissions.roles import (
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_VIEW,
    CAP_ORDERS_VIEW,
    HasAnyCapability,
    HasCapability,
)


def error_response(*, code: str, message: str, http_status: int, details=None):
    body = {"code": code, "message": message}
    if details:
        body["details"] = details
    return Response({"error": body}, status=http_status)


def _int_param(request, name):
    raw = (request.query_params.get(name) or "").strip()
    return int(raw) if raw.isdigit() else None


class StockReceiptView(APIView):
    """
    POST /api/inventory/receipts/

    Loads units into a (product, warehouse, location) bucket.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_RECEIVE

    @extend_schema(request=ReceiptInputSerializer, responses={201: StockLevelSerializer})
    def post(self, request):
        serializer = ReceiptInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            level = receive_stock(
                product=data["product_id"],
                warehouse=data["warehouse_id"],
                location=data.get("location_id"),
                quantity=data["quantity"],
                note=data.get("note", ""),
                user=request.user,
            )
        except InventoryError as exc:
            return error_response(
                code=exc.code,
                message=exc.message,
                http_status=exc.status_code,
                details=exc.details,
            )

        return Response(StockLevelSerializer(level).data, status=status.HTTP_201_CREATED)


class StockLevelListView(generics.ListAPIView):
    """GET /api/inventory/levels/?product=&warehouse="""

    serializer_class = StockLevelSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW

    @extend_schema(
        parameters=[
            OpenApiParameter("product", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("warehouse", int, OpenApiParameter.QUERY, required=False),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        qs = StockLevel.objects.select_related("product", "warehouse", "location").order_by("id")
        product_id = _int_param(self.request, "product")
        if product_id:
            qs = qs.filter(product_id=product_id)
        warehouse_id = _int_param(self.request, "warehouse")
        if warehouse_id:
            qs = qs.filter(warehouse_id=warehouse_id)
        return qs


class ReservationListView(generics.ListAPIView):
    """GET /api/inventory/reservations/?order=&status="""

    serializer_class = StockReservationSerializer
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_ORDERS_VIEW}

    def get_queryset(self):
        qs = StockReservation.objects.select_related("order").order_by("id")
        order_id = _int_param(self.request, "order")
        if order_id:
            qs = qs.filter(order_id=order_id)
        status_value = (self.request.query_params.get("status") or "").strip()
        if status_value:
            qs = qs.filter(status=status_value)
        return qs


class StockMovementListView(generics.ListAPIView):
    """GET /api/inventory/movements/?product=&order="""

    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW

    def get_queryset(self):
        qs = StockMovement.objects.order_by("-created_at")
        product_id = _int_param(self.request, "product")
        if product_id:
            qs = qs.filter(product_id=product_id)
        order_id = _int_param(self.request, "order")
        if order_id:
            qs = qs.filter(order_id=order_id)
        return qs
