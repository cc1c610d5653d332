# orders/services/exceptions.py

"""
WORK ORDER DOMAIN ERRORS

All errors are "rejected operation" kinds. Each exposes:
- status_code : 400 validation / 404 missing / 409 conflict
- code        : stable machine code for UI mapping
- details     : structured context (field, ids, ...)

No DRF imports here; the API layer maps status_code to a response.
"""

from __future__ import annotations


class WorkOrderError(Exception):
    status_code = 400
    code = "work_order_error"

    def __init__(self, message: str = "", *, code: str | None = None, details: dict | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if code:
            self.code = code
        self.details = details or {}


# ------------------------------------------------------------
# 400
# ------------------------------------------------------------

class OrderValidationError(WorkOrderError):
    status_code = 400
    code = "validation_error"


class ReferenceUnavailableError(WorkOrderError):
    status_code = 400
    code = "reference_unavailable"


# ------------------------------------------------------------
# 404
# ------------------------------------------------------------

class OrderNotFoundError(WorkOrderError):
    status_code = 404
    code = "order_not_found"


# ------------------------------------------------------------
# 409
# ------------------------------------------------------------

class BusinessRuleError(WorkOrderError):
    status_code = 409
    code = "business_rule_violation"


class InvalidTransitionError(BusinessRuleError):
    code = "invalid_transition"


class EditNotAllowedError(BusinessRuleError):
    code = "edit_not_allowed"


class CodeAllocationError(WorkOrderError):
    status_code = 409
    code = "code_allocation_failed"
