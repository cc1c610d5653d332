from .stock import ReservationListView, StockLevelListView, StockMovementListView, StockReceiptView

__all__ = [
    "ReservationListView",
    "StockLevelListView",
    "StockMovementListView",
    "StockReceiptView",
]
