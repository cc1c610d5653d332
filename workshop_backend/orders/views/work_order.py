# orders/views/work_order.py

from django.db.models import Prefetch
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.services.exceptions import InventoryError
from orders.filters import WorkOrderFilter
from orders.models import WorkOrder, WorkOrderLine
from orders.serializers import (
    CreateOrderInputSerializer,
    UpdateOrderInputSerializer,
    WorkOrderListSerializer,
    WorkOrderSerializer,
)
from orders.services.exceptions import WorkOrderError
from orders.services.order_cancellation import cancel_order
from orders.services.order_creation import create_order
from orders.services.order_update import update_order
from orders.services.progress import compute_progress
from permissions.roles import (
    CAP_ORDERS_CANCEL,
    CAP_ORDERS_CREATE,
    CAP_ORDERS_EDIT,
    CAP_ORDERS_PAYMENTS,
    CAP_ORDERS_VIEW,
    HasCapability,
    effective_capabilities_for,
)


# ======================================================
# API ERROR NORMALIZATION
# ======================================================

def error_response(*, code: str, message: str, http_status: int, details=None):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    if details:
        body["details"] = details
    return Response({"error": body}, status=http_status)


def domain_error_response(exc):
    # Both domain hierarchies carry status_code / code / message / details.
    return error_response(
        code=exc.code,
        message=exc.message,
        http_status=exc.status_code,
        details=exc.details,
    )


# ======================================================
# WORK ORDER VIEWSET
# ======================================================

class WorkOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Work orders.

    - list/retrieve: active orders only, with task progress
    - create:        validate + price + persist (201 {order, summary})
    - partial_update: lifecycle transition / edit / assignment / payment
    - destroy:       soft cancellation (releases pending reservations)
    - progress:      task counters for one order
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    filter_backends = [DjangoFilterBackend]
    filterset_class = WorkOrderFilter

    required_capability = None

    ACTION_CAPABILITIES = {
        "list": CAP_ORDERS_VIEW,
        "retrieve": CAP_ORDERS_VIEW,
        "progress": CAP_ORDERS_VIEW,
        "create": CAP_ORDERS_CREATE,
        "partial_update": CAP_ORDERS_EDIT,
        "destroy": CAP_ORDERS_CANCEL,
    }

    def get_permissions(self):
        self.required_capability = self.ACTION_CAPABILITIES.get(self.action, CAP_ORDERS_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = (
            WorkOrder.objects
            .filter(is_active=True)
            .select_related("customer", "vehicle", "principal_worker")
        )
        if self.action == "list":
            return qs
        return qs.prefetch_related(
            Prefetch(
                "lines",
                queryset=WorkOrderLine.objects.select_related("service", "product", "task", "task__worker"),
            ),
            "roster__worker",
            "payments",
        )

    def get_serializer_class(self):
        if self.action == "list":
            return WorkOrderListSerializer
        if self.action == "create":
            return CreateOrderInputSerializer
        if self.action == "partial_update":
            return UpdateOrderInputSerializer
        return WorkOrderSerializer

    def _detail(self, order):
        return WorkOrderSerializer(self.get_queryset().get(pk=order.pk)).data

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    @extend_schema(request=CreateOrderInputSerializer, responses={201: WorkOrderSerializer})
    def create(self, request, *args, **kwargs):
        serializer = CreateOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = create_order(payload=serializer.validated_data, user=request.user)
        except (WorkOrderError, InventoryError) as exc:
            return domain_error_response(exc)

        return Response(
            {"order": self._detail(result.order), "summary": result.summary},
            status=status.HTTP_201_CREATED,
        )

    # --------------------------------------------------
    # PARTIAL UPDATE
    # --------------------------------------------------

    @extend_schema(request=UpdateOrderInputSerializer, responses={200: WorkOrderSerializer})
    def partial_update(self, request, *args, **kwargs):
        serializer = UpdateOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = dict(serializer.validated_data)

        if payload.get("payment") and CAP_ORDERS_PAYMENTS not in effective_capabilities_for(request.user):
            return error_response(
                code="permission_denied",
                message="You are not allowed to register payments.",
                http_status=status.HTTP_403_FORBIDDEN,
            )

        try:
            result = update_order(order_id=kwargs.get("pk"), payload=payload, user=request.user)
        except (WorkOrderError, InventoryError) as exc:
            return domain_error_response(exc)

        return Response(
            {
                "order": self._detail(result.order),
                "progress": result.progress,
                "payment": result.payment.as_dict() if result.payment else None,
                "changed": list(result.changed_fields),
                "side_effects": [o.as_dict() for o in result.side_effects if not o.ok],
            },
            status=status.HTTP_200_OK,
        )

    # --------------------------------------------------
    # CANCEL (SOFT DELETE)
    # --------------------------------------------------

    def destroy(self, request, *args, **kwargs):
        try:
            order = cancel_order(order_id=kwargs.get("pk"), user=request.user)
        except (WorkOrderError, InventoryError) as exc:
            return domain_error_response(exc)

        return Response(
            {"id": order.pk, "code": order.code, "is_active": order.is_active},
            status=status.HTTP_200_OK,
        )

    # --------------------------------------------------
    # PROGRESS
    # --------------------------------------------------

    @extend_schema(
        parameters=[OpenApiParameter("id", int, OpenApiParameter.PATH)],
        responses={200: {"type": "object"}},
    )
    @action(detail=True, methods=["get"], url_path="progress")
    def progress(self, request, pk=None):
        order = self.get_object()
        return Response(compute_progress(order), status=status.HTTP_200_OK)
