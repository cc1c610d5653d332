# inventory/services/exceptions.py

"""
INVENTORY DOMAIN ERRORS

Every error carries:
- status_code : HTTP-style class for the transport layer (no DRF import here)
- code        : stable machine code for UI mapping
- details     : optional structured context
"""

from __future__ import annotations


class InventoryError(Exception):
    status_code = 400
    code = "inventory_error"

    def __init__(self, message: str = "", *, code: str | None = None, details: dict | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if code:
            self.code = code
        self.details = details or {}


class InvalidQuantityError(InventoryError):
    status_code = 400
    code = "invalid_quantity"


class InvalidLocationError(InventoryError):
    status_code = 400
    code = "invalid_location"


class ProductUnavailableError(InventoryError):
    status_code = 409
    code = "product_unavailable"


class InsufficientStockError(InventoryError):
    status_code = 409
    code = "insufficient_stock"


class ReservationNotFoundError(InventoryError):
    status_code = 404
    code = "reservation_not_found"


class ReservationStateError(InventoryError):
    status_code = 409
    code = "reservation_not_pending"
