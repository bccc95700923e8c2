from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Text, JSON, Index, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class DocumentType(enum.Enum):
    QUOTATION = "Quotation"
    INVOICE = "Invoice"
    PURCHASE_ORDER = "PurchaseOrder"
    AMC_QUOTATION = "AMCQuotation"
    AMC_INVOICE = "AMCInvoice"
    DG_QUOTATION = "DGQuotation"
    DG_INVOICE = "DGInvoice"
    DG_PURCHASE_ORDER = "DGPurchaseOrder"
    DG_PROFORMA = "DGProforma"

class PaymentMethod(enum.Enum):
    CASH = "cash"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"
    OTHER = "other"

class PaymentStatus(enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

class PaymentRecord(Base, AuditMixin):
    """One discrete payment against a billable document of any family."""
    __tablename__ = "payment_records"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_records_amount_positive"),
        Index("ix_payment_records_parent", "parent_document_type", "parent_document_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    parent_document_type = Column(String(30), nullable=False)
    parent_document_id = Column(Integer, nullable=False)
    document_number = Column(String, nullable=False)
    payer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    payment_method = Column(String(20), nullable=False)
    # Always exactly one key: the canonical backend key of payment_method
    payment_method_details = Column(JSON, nullable=False, default=dict)
    payment_status = Column(String(20), default=PaymentStatus.COMPLETED.value, nullable=False)
    payment_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    receipt_number = Column(String, nullable=True)

    # Relationships
    payer = relationship("BusinessPartner", back_populates="payments")
