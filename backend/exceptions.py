"""
Domain exceptions for the payment reconciliation engine.

Each class carries the HTTP status it is surfaced as and a default message,
so services raise by meaning and main.py does the translation in one place.
"""

from decimal import Decimal
from typing import Optional


class PaymentError(Exception):
    """Base class for every error the payment services raise on purpose."""
    status_code = 500
    default_detail = "Payment request could not be processed."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(PaymentError):
    """
    Malformed or incomplete payment method details, a non-positive amount,
    an unknown payment method or an illegal status transition.
    """
    status_code = 400
    default_detail = "Invalid payment data."


class NotFoundError(PaymentError):
    """Parent document, payer or payment does not exist."""
    status_code = 404
    default_detail = "Resource not found."


class ConflictError(PaymentError):
    """Payment amount exceeds the document's current remaining amount."""
    status_code = 409
    default_detail = "Payment amount exceeds the remaining amount."

    def __init__(self, requested: Decimal, remaining: Decimal, detail: Optional[str] = None):
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            detail or f"Payment amount ({requested}) exceeds remaining amount ({remaining})."
        )


class InternalError(PaymentError):
    """
    Persistence or reconciliation failure unrelated to caller input.
    The detail is logged server-side; clients only see the default message.
    """
    status_code = 500
    default_detail = "An internal error occurred while processing the payment."


class ReceiptRenderError(PaymentError):
    status_code = 502
    default_detail = "Failed to generate the payment receipt."


class ReceiptTimeoutError(ReceiptRenderError):
    status_code = 504
    default_detail = "Generating the payment receipt took too long."
