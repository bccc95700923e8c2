from sqlalchemy import Column, Integer, String, Text, Boolean
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class PartnerStatus(enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    BLOCKED = "Blocked"

class BusinessPartner(Base, TimestampMixin):
    """A payer: the customer on sales-side documents or the supplier on purchase orders."""
    __tablename__ = "business_partners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    contact_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    gst_number = Column(String(20), nullable=True)
    status = Column(String(20), default=PartnerStatus.ACTIVE.value, nullable=False)
    is_supplier = Column(Boolean, default=False, nullable=False)
    is_customer = Column(Boolean, default=True, nullable=False)

    # Relationships
    payments = relationship("PaymentRecord", back_populates="payer")
