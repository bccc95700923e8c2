"""
Per-family mapping between billable documents and the reconciliation engine.

Every document family stores the same payment aggregate under slightly
different names and status literals. An adapter hides those differences so
the engine works on one canonical pending/partial/paid tri-state.
"""

import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Type

from sqlalchemy.orm import Session

from database import Base
from exceptions import NotFoundError
from models.invoices import (
    AMCInvoice,
    AMCInvoicePaymentStatus,
    DGInvoice,
    DGInvoicePaymentStatus,
    DGProforma,
    Invoice,
    InvoicePaymentStatus,
)
from models.payments import DocumentType, PaymentMethod, PaymentStatus
from models.purchase_orders import DGPurchaseOrder, PurchaseOrder, PurchaseOrderPaymentStatus
from models.quotations import (
    AMCQuotation,
    AMCQuotationPaymentStatus,
    DGPaymentStatus,
    DGQuotation,
    Quotation,
    QuotationPaymentStatus,
)
from utils.payment_methods import FULL_BANK_TRANSFER_FIELDS

logger = logging.getLogger("reconciliation")


class SettlementStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class OverpaymentPolicy(enum.Enum):
    BLOCK = "block"
    WARN = "warn"


COMPLETED_AND_PROCESSING = frozenset({PaymentStatus.COMPLETED.value, PaymentStatus.PROCESSING.value})
COMPLETED_ONLY = frozenset({PaymentStatus.COMPLETED.value})


@dataclass(frozen=True)
class DocumentAdapter:
    document_type: DocumentType
    model: Type[Base]
    status_enum: Type[enum.Enum]
    route_prefix: str
    label: str
    total_field: str
    number_field: str
    payer_field: str = "customer_id"
    # Extra literals a caller may ask to keep, and the canonical state each stands for
    held_labels: Mapping[str, SettlementStatus] = field(default_factory=dict)
    counted_statuses: FrozenSet[str] = COMPLETED_AND_PROCESSING
    overpayment_policy: OverpaymentPolicy = OverpaymentPolicy.BLOCK
    required_detail_fields: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def status_labels(self) -> Dict[SettlementStatus, str]:
        return {
            SettlementStatus.PENDING: self.status_enum["PENDING"].value,
            SettlementStatus.PARTIAL: self.status_enum["PARTIAL"].value,
            SettlementStatus.PAID: self.status_enum["PAID"].value,
        }

    def get_total(self, doc) -> Decimal:
        return Decimal(getattr(doc, self.total_field) or 0)

    def get_paid(self, doc) -> Decimal:
        return Decimal(doc.paid_amount or 0)

    def get_remaining(self, doc) -> Decimal:
        return Decimal(doc.remaining_amount or 0)

    def get_status(self, doc) -> str:
        return doc.payment_status

    def get_number(self, doc) -> str:
        return getattr(doc, self.number_field)

    def get_payer_id(self, doc) -> int:
        return getattr(doc, self.payer_field)

    def counts_toward_paid(self, payment_status: str) -> bool:
        return payment_status in self.counted_statuses

    def to_canonical(self, label: str) -> Optional[SettlementStatus]:
        for canonical, literal in self.status_labels.items():
            if literal == label:
                return canonical
        return self.held_labels.get(label)

    def status_label(self, canonical: SettlementStatus, requested: Optional[str] = None) -> str:
        """Family literal for ``canonical``; a declared held label wins when it is equivalent."""
        if requested:
            if self.held_labels.get(requested) == canonical:
                return requested
            logger.info(
                f"{self.label}: requested status '{requested}' not applicable to computed "
                f"state '{canonical.value}', storing the computed status"
            )
        return self.status_labels[canonical]

    def set_aggregate(self, doc, paid: Decimal, remaining: Decimal, status_label: str):
        """Write the derived fields. Only the reconciliation engine calls this."""
        doc.paid_amount = paid
        doc.remaining_amount = remaining
        doc.payment_status = status_label

    def load(self, db: Session, document_id: int, for_update: bool = False):
        query = db.query(self.model).filter(self.model.id == document_id)
        if for_update:
            # Re-read under the lock; the identity map may hold a copy from before it
            query = query.with_for_update().populate_existing()
        doc = query.first()
        if doc is None:
            raise NotFoundError(f"{self.label} not found")
        return doc


ADAPTERS: Dict[DocumentType, DocumentAdapter] = {
    adapter.document_type: adapter
    for adapter in (
        DocumentAdapter(
            document_type=DocumentType.QUOTATION,
            model=Quotation,
            status_enum=QuotationPaymentStatus,
            route_prefix="quotation",
            label="Quotation",
            total_field="grand_total",
            number_field="quotation_number",
            overpayment_policy=OverpaymentPolicy.WARN,
            required_detail_fields={PaymentMethod.BANK_TRANSFER.value: FULL_BANK_TRANSFER_FIELDS},
        ),
        DocumentAdapter(
            document_type=DocumentType.INVOICE,
            model=Invoice,
            status_enum=InvoicePaymentStatus,
            route_prefix="invoice",
            label="Invoice",
            total_field="total_amount",
            number_field="invoice_number",
            held_labels={InvoicePaymentStatus.GST_PENDING.value: SettlementStatus.PARTIAL},
        ),
        DocumentAdapter(
            document_type=DocumentType.PURCHASE_ORDER,
            model=PurchaseOrder,
            status_enum=PurchaseOrderPaymentStatus,
            route_prefix="purchase-order",
            label="Purchase Order",
            total_field="total_amount",
            number_field="po_number",
            payer_field="supplier_id",
        ),
        DocumentAdapter(
            document_type=DocumentType.AMC_QUOTATION,
            model=AMCQuotation,
            status_enum=AMCQuotationPaymentStatus,
            route_prefix="amc-quotation",
            label="AMC Quotation",
            total_field="grand_total",
            number_field="quotation_number",
            held_labels={AMCQuotationPaymentStatus.GST_PENDING.value: SettlementStatus.PARTIAL},
        ),
        DocumentAdapter(
            document_type=DocumentType.AMC_INVOICE,
            model=AMCInvoice,
            status_enum=AMCInvoicePaymentStatus,
            route_prefix="amc-invoice",
            label="AMC Invoice",
            total_field="grand_total",
            number_field="invoice_number",
            counted_statuses=COMPLETED_ONLY,
        ),
        DocumentAdapter(
            document_type=DocumentType.DG_QUOTATION,
            model=DGQuotation,
            status_enum=DGPaymentStatus,
            route_prefix="dg-quotation",
            label="DG Quotation",
            total_field="grand_total",
            number_field="quotation_number",
        ),
        DocumentAdapter(
            document_type=DocumentType.DG_INVOICE,
            model=DGInvoice,
            status_enum=DGInvoicePaymentStatus,
            route_prefix="dg-invoice",
            label="DG Invoice",
            total_field="total_amount",
            number_field="invoice_number",
            held_labels={DGInvoicePaymentStatus.GST_PENDING.value: SettlementStatus.PARTIAL},
            counted_statuses=COMPLETED_ONLY,
        ),
        DocumentAdapter(
            document_type=DocumentType.DG_PURCHASE_ORDER,
            model=DGPurchaseOrder,
            status_enum=PurchaseOrderPaymentStatus,
            route_prefix="dg-purchase-order",
            label="DG Purchase Order",
            total_field="total_amount",
            number_field="po_number",
            payer_field="supplier_id",
        ),
        DocumentAdapter(
            document_type=DocumentType.DG_PROFORMA,
            model=DGProforma,
            status_enum=DGPaymentStatus,
            route_prefix="dg-proforma",
            label="DG Proforma",
            total_field="total_amount",
            number_field="proforma_number",
        ),
    )
}


def get_adapter(document_type) -> DocumentAdapter:
    if not isinstance(document_type, DocumentType):
        try:
            document_type = DocumentType(document_type)
        except ValueError:
            raise NotFoundError(f"Unknown document type '{document_type}'")
    return ADAPTERS[document_type]
