from .work_order import (
    OrderPaymentSerializer,
    TaskSerializer,
    WorkOrderLineSerializer,
    WorkOrderListSerializer,
    WorkOrderSerializer,
    WorkOrderWorkerSerializer,
)
from .commands import (
    CreateOrderInputSerializer,
    OrderItemInputSerializer,
    PaymentInputSerializer,
    UpdateOrderInputSerializer,
)

__all__ = [
    "OrderPaymentSerializer",
    "TaskSerializer",
    "WorkOrderLineSerializer",
    "WorkOrderListSerializer",
    "WorkOrderSerializer",
    "WorkOrderWorkerSerializer",
    "CreateOrderInputSerializer",
    "OrderItemInputSerializer",
    "PaymentInputSerializer",
    "UpdateOrderInputSerializer",
]
