from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin
from models.quotations import DGPaymentStatus

class InvoicePaymentStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    GST_PENDING = "gst_pending"

class AMCInvoicePaymentStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"

class DGInvoicePaymentStatus(enum.Enum):
    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"
    OVERDUE = "Overdue"
    GST_PENDING = "GST Pending"

class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    invoice_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=InvoicePaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}

class AMCInvoice(Base, TimestampMixin):
    __tablename__ = "amc_invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    invoice_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    grand_total = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=AMCInvoicePaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}

class DGInvoice(Base, TimestampMixin):
    __tablename__ = "dg_invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    invoice_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=DGInvoicePaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}

class DGProforma(Base, TimestampMixin):
    __tablename__ = "dg_proformas"

    id = Column(Integer, primary_key=True, index=True)
    proforma_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    proforma_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=DGPaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}
