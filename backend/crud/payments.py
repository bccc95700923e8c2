"""
Persistence for payment records.

Functions here stage changes and flush but never commit: a payment write is
only half of a unit of work, the other half being the parent document's
aggregate (see services/payments.py).
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from exceptions import ValidationError
from models.audit_mixin import local_now
from models.payments import DocumentType, PaymentRecord
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict


def _type_value(document_type) -> str:
    if isinstance(document_type, DocumentType):
        return document_type.value
    return document_type


def _check_amount(amount):
    if amount is None or Decimal(amount) <= 0:
        raise ValidationError("Payment amount must be greater than 0")


def find_by_parent(db: Session, document_type, parent_id: int) -> List[PaymentRecord]:
    """Payments of one document, newest payment date first."""
    return db.query(PaymentRecord).filter(
        PaymentRecord.parent_document_type == _type_value(document_type),
        PaymentRecord.parent_document_id == parent_id
    ).order_by(
        PaymentRecord.payment_date.desc(), PaymentRecord.id.desc()
    ).populate_existing().all()


def find_by_id(db: Session, payment_id: int, document_type=None, for_update: bool = False) -> Optional[PaymentRecord]:
    query = db.query(PaymentRecord).filter(PaymentRecord.id == payment_id)
    if document_type is not None:
        query = query.filter(PaymentRecord.parent_document_type == _type_value(document_type))
    if for_update:
        query = query.with_for_update().populate_existing()
    return query.first()


def find_parent_id(db: Session, payment_id: int, document_type) -> Optional[int]:
    """Parent document id of a payment, read as a bare column so no stale row lands in the session."""
    row = db.query(PaymentRecord.parent_document_id).filter(
        PaymentRecord.id == payment_id,
        PaymentRecord.parent_document_type == _type_value(document_type)
    ).first()
    return row[0] if row else None


def create(db: Session, document_type, parent_id: int, values: Dict[str, Any], user_id: str) -> PaymentRecord:
    _check_amount(values.get("amount"))
    db_payment = PaymentRecord(
        parent_document_type=_type_value(document_type),
        parent_document_id=parent_id,
        created_by=user_id,
        **values
    )
    db.add(db_payment)
    db.flush()

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name='payment_records',
        record_id=db_payment.id,
        changed_by=user_id,
        action='CREATE',
        old_values={},
        new_values=sqlalchemy_to_dict(db_payment)
    ))
    return db_payment


def update(db: Session, db_payment: PaymentRecord, changes: Dict[str, Any], user_id: str) -> PaymentRecord:
    if "amount" in changes:
        _check_amount(changes["amount"])

    old_values = sqlalchemy_to_dict(db_payment)
    for key, value in changes.items():
        setattr(db_payment, key, value)
    db_payment.updated_at = local_now()
    db_payment.updated_by = user_id
    db.flush()

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name='payment_records',
        record_id=db_payment.id,
        changed_by=user_id,
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_payment)
    ))
    return db_payment


def delete(db: Session, db_payment: PaymentRecord, user_id: str) -> PaymentRecord:
    """Soft-delete; the row drops out of every later select, including aggregates."""
    old_values = sqlalchemy_to_dict(db_payment)
    db_payment.deleted_at = local_now()
    db_payment.deleted_by = user_id
    db.flush()

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name='payment_records',
        record_id=db_payment.id,
        changed_by=user_id,
        action='DELETE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_payment)
    ))
    return db_payment
