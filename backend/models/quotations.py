from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class QuotationPaymentStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    FAILED = "failed"

class AMCQuotationPaymentStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    GST_PENDING = "gst_pending"

class DGPaymentStatus(enum.Enum):
    """Title-cased literals shared by the DG quotation and DG proforma documents."""
    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"
    OVERDUE = "Overdue"

class Quotation(Base, TimestampMixin):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)
    quotation_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    issue_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    grand_total = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=QuotationPaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}

class AMCQuotation(Base, TimestampMixin):
    __tablename__ = "amc_quotations"

    id = Column(Integer, primary_key=True, index=True)
    quotation_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    issue_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    grand_total = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=AMCQuotationPaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}

class DGQuotation(Base, TimestampMixin):
    __tablename__ = "dg_quotations"

    id = Column(Integer, primary_key=True, index=True)
    quotation_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    issue_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    grand_total = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=DGPaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])

    __mapper_args__ = {"version_id_col": version}
