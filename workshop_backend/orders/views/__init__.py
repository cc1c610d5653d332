from .work_order import WorkOrderViewSet

__all__ = ["WorkOrderViewSet"]
