from .warehouse import Location, Warehouse
from .stock_level import LegacyStock, StockLevel
from .reservation import StockReservation
from .stock_movement import StockMovement

__all__ = [
    "Warehouse",
    "Location",
    "StockLevel",
    "LegacyStock",
    "StockReservation",
    "StockMovement",
]
