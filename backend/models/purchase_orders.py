from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class PurchaseOrderPaymentStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"

class PurchaseOrder(Base, TimestampMixin):
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    po_number = Column(String, unique=True, index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    order_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=PurchaseOrderPaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    supplier = relationship("BusinessPartner", foreign_keys=[supplier_id])

    __mapper_args__ = {"version_id_col": version}

class DGPurchaseOrder(Base, TimestampMixin):
    __tablename__ = "dg_purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    po_number = Column(String, unique=True, index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    order_date = Column(Date, nullable=True)
    currency = Column(String(3), default="INR", nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    remaining_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    payment_status = Column(String(30), default=PurchaseOrderPaymentStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    supplier = relationship("BusinessPartner", foreign_keys=[supplier_id])

    __mapper_args__ = {"version_id_col": version}
