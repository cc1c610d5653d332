from .work_order import WorkOrder
from .line import WorkOrderLine
from .assignment import WorkOrderWorker
from .task import Task
from .payment import OrderPayment

__all__ = [
    "WorkOrder",
    "WorkOrderLine",
    "WorkOrderWorker",
    "Task",
    "OrderPayment",
]
