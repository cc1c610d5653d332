from .stock import (
    ReceiptInputSerializer,
    StockLevelSerializer,
    StockMovementSerializer,
    StockReservationSerializer,
)

__all__ = [
    "ReceiptInputSerializer",
    "StockLevelSerializer",
    "StockMovementSerializer",
    "StockReservationSerializer",
]
