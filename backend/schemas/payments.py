from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, Dict, Any, List
from datetime import date, datetime
from decimal import Decimal

from models.payments import PaymentStatus

# Matches the Numeric(12, 2) amount column
PaymentAmount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PaymentCreate(CamelModel):
    parent_id: int
    document_number: Optional[str] = None
    payer_id: Optional[int] = None
    amount: PaymentAmount
    currency: Optional[str] = None
    payment_method: str
    payment_method_details: Optional[Any] = None
    payment_status: Optional[PaymentStatus] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    receipt_number: Optional[str] = None
    # Held document status literal, e.g. "gst_pending"
    status_label: Optional[str] = None
    allow_overpayment: bool = False


class PaymentUpdate(CamelModel):
    amount: Optional[PaymentAmount] = None
    payment_method: Optional[str] = None
    payment_method_details: Optional[Any] = None
    payment_status: Optional[PaymentStatus] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    receipt_number: Optional[str] = None
    status_label: Optional[str] = None
    allow_overpayment: bool = False


class PaymentStatusUpdate(CamelModel):
    payment_status: PaymentStatus
    notes: Optional[str] = None
    status_label: Optional[str] = None


class ReconcileRequest(CamelModel):
    status_label: Optional[str] = None


class DocumentPaymentState(CamelModel):
    document_type: str
    document_id: int
    document_number: str
    currency: str
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    payment_status: str


class Payment(CamelModel):
    id: int
    parent_document_type: str
    parent_document_id: int
    document_number: str
    payer_id: int
    amount: Decimal
    currency: str
    payment_method: str
    payment_method_details: Dict[str, Any]
    payment_status: str
    payment_date: date
    notes: Optional[str] = None
    receipt_number: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentResult(Payment):
    """A payment plus the parent document's aggregate after reconciliation."""
    document: Optional[DocumentPaymentState] = None


class PaymentDeleted(CamelModel):
    message: str
    payment_id: int
    document: DocumentPaymentState


class PaymentStatusBreakdown(CamelModel):
    payment_status: str
    count: int
    total_amount: Decimal


class PaymentSummary(CamelModel):
    document: DocumentPaymentState
    breakdown: List[PaymentStatusBreakdown]
    total_paid: Decimal
    total_outstanding: Decimal
