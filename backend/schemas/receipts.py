from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal


class ReceiptLine(BaseModel):
    label: str
    value: str


class ReceiptPayer(BaseModel):
    id: int
    name: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None


class ReceiptDocument(BaseModel):
    document_type: str
    label: str
    number: str
    currency: str
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    payment_status: str


class ReceiptView(BaseModel):
    """Everything the PDF renderer needs, already joined and formatted."""
    receipt_number: str
    payment_id: int
    payment_date: date
    amount: Decimal
    currency: str
    amount_display: str
    amount_in_words: str
    payment_method: str
    payment_method_label: str
    payment_status: str
    method_details: List[ReceiptLine]
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    issued_at: datetime
    document: ReceiptDocument
    payer: ReceiptPayer
