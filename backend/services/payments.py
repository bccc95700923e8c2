"""
Payment orchestration.

Every mutation runs as one unit of work: validate, lock the parent document,
write the payment, reconcile the parent, commit once. Nothing here adjusts
paid_amount directly; crud.reconciliation recomputes it from the full payment
set inside the same transaction.
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

import config
from crud import payments as payment_store
from crud import reconciliation
from crud.document_adapters import DocumentAdapter
from database import run_in_transaction
from exceptions import NotFoundError, ValidationError
from models.audit_mixin import local_now
from models.business_partners import BusinessPartner
from models.payments import PaymentRecord, PaymentStatus
from schemas.payments import (
    DocumentPaymentState,
    PaymentCreate,
    PaymentStatusBreakdown,
    PaymentStatusUpdate,
    PaymentSummary,
    PaymentUpdate,
)
from utils.payment_methods import normalize_payment_method_details, validate_payment_method_details

logger = logging.getLogger("payments")

ALLOWED_TRANSITIONS = {
    PaymentStatus.PENDING.value: {
        PaymentStatus.PROCESSING.value, PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value
    },
    PaymentStatus.PROCESSING.value: {PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value},
    PaymentStatus.COMPLETED.value: {PaymentStatus.REFUNDED.value},
    PaymentStatus.FAILED.value: {PaymentStatus.PENDING.value},
    PaymentStatus.REFUNDED.value: set(),
}

# A payment can only be recorded in one of these; failed and refunded are reached by transition
INITIAL_STATUSES = (PaymentStatus.COMPLETED.value, PaymentStatus.PENDING.value, PaymentStatus.PROCESSING.value)


def document_state(adapter: DocumentAdapter, document) -> DocumentPaymentState:
    return DocumentPaymentState(
        document_type=adapter.document_type.value,
        document_id=document.id,
        document_number=adapter.get_number(document),
        currency=document.currency,
        total_amount=reconciliation.to_money(adapter.get_total(document)),
        paid_amount=reconciliation.to_money(adapter.get_paid(document)),
        remaining_amount=reconciliation.to_money(adapter.get_remaining(document)),
        payment_status=adapter.get_status(document),
    )


def check_transition(current: str, new: str):
    """Raise ValidationError unless ``current -> new`` is a legal payment status move."""
    if current == new:
        return
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationError(f"Cannot change payment status from '{current}' to '{new}'")


def _method_details(adapter: DocumentAdapter, payment_method, details) -> dict:
    error = validate_payment_method_details(payment_method, details, adapter.required_detail_fields)
    if error:
        raise ValidationError(error)
    return normalize_payment_method_details(payment_method, details)


def _check_currency(adapter: DocumentAdapter, document, currency: str):
    if currency not in config.SUPPORTED_CURRENCIES:
        raise ValidationError(f"Unsupported currency '{currency}'")
    if document.currency and currency != document.currency:
        raise ValidationError(
            f"Payment currency {currency} does not match {adapter.label} currency {document.currency}"
        )


def _check_positive(amount):
    if amount is None or Decimal(amount) <= 0:
        raise ValidationError("Payment amount must be greater than 0")


def get_payment(db: Session, adapter: DocumentAdapter, payment_id: int) -> PaymentRecord:
    db_payment = payment_store.find_by_id(db, payment_id, adapter.document_type)
    if db_payment is None:
        raise NotFoundError("Payment not found")
    return db_payment


def lock_payment(db: Session, adapter: DocumentAdapter, payment_id: int) -> Tuple[PaymentRecord, object]:
    """
    Lock the parent document, then re-read the payment under that lock.

    The returned payment reflects every change committed before the lock was
    granted; its status and amount are safe to validate against.
    """
    parent_id = payment_store.find_parent_id(db, payment_id, adapter.document_type)
    if parent_id is None:
        raise NotFoundError("Payment not found")
    document = adapter.load(db, parent_id, for_update=True)
    db_payment = payment_store.find_by_id(db, payment_id, adapter.document_type, for_update=True)
    if db_payment is None:
        raise NotFoundError("Payment not found")
    return db_payment, document


def list_payments(db: Session, adapter: DocumentAdapter, parent_id: int) -> List[PaymentRecord]:
    adapter.load(db, parent_id)
    return payment_store.find_by_parent(db, adapter.document_type, parent_id)


def record_payment(
    db: Session, adapter: DocumentAdapter, payment_in: PaymentCreate, user_id: str
) -> Tuple[PaymentRecord, DocumentPaymentState]:
    """
    Validate and persist a payment, then resync the parent document.

    The overpayment guard runs against the remaining amount computed from the
    payments already committed, under the parent's row lock.
    """
    _check_positive(payment_in.amount)
    method_details = _method_details(adapter, payment_in.payment_method, payment_in.payment_method_details)
    payment_status = (payment_in.payment_status or PaymentStatus.COMPLETED).value
    if payment_status not in INITIAL_STATUSES:
        raise ValidationError(
            f"A payment cannot be recorded as '{payment_status}'; use one of {', '.join(INITIAL_STATUSES)}"
        )

    def work():
        document = adapter.load(db, payment_in.parent_id, for_update=True)
        currency = payment_in.currency or document.currency or config.DEFAULT_CURRENCY
        _check_currency(adapter, document, currency)

        payer_id = payment_in.payer_id or adapter.get_payer_id(document)
        if payer_id is None or db.query(BusinessPartner).filter(BusinessPartner.id == payer_id).first() is None:
            raise NotFoundError("Payer not found")

        if adapter.counts_toward_paid(payment_status) and not payment_in.allow_overpayment:
            current = reconciliation.preview(db, adapter, document)
            reconciliation.enforce_remaining(adapter, document, payment_in.amount, current)

        db_payment = payment_store.create(db, adapter.document_type, document.id, {
            "document_number": payment_in.document_number or adapter.get_number(document),
            "payer_id": payer_id,
            "amount": reconciliation.to_money(payment_in.amount),
            "currency": currency,
            "payment_method": payment_in.payment_method,
            "payment_method_details": method_details,
            "payment_status": payment_status,
            "payment_date": payment_in.payment_date or local_now().date(),
            "notes": payment_in.notes,
            "receipt_number": payment_in.receipt_number,
        }, user_id)
        reconciliation.reconcile(db, adapter.document_type, document.id, payment_in.status_label)
        return db_payment, document_state(adapter, document)

    db_payment, state = run_in_transaction(
        db, work, description=f"Recording {adapter.label} payment for document {payment_in.parent_id}"
    )
    db.refresh(db_payment)
    logger.info(
        f"Payment of {db_payment.amount} recorded for {adapter.label} {state.document_number} "
        f"by user {user_id}, document now {state.payment_status}"
    )
    return db_payment, state


def update_payment(
    db: Session, adapter: DocumentAdapter, payment_id: int, payment_in: PaymentUpdate, user_id: str
) -> Tuple[PaymentRecord, DocumentPaymentState]:
    changes = payment_in.model_dump(exclude_unset=True, exclude={"status_label", "allow_overpayment"})
    if "amount" in changes:
        _check_positive(changes["amount"])
        changes["amount"] = reconciliation.to_money(changes["amount"])
    if changes.get("payment_status") is not None:
        changes["payment_status"] = changes["payment_status"].value
    for key in ("payment_status", "payment_method", "payment_date"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be empty")

    def work():
        values = dict(changes)
        db_payment, document = lock_payment(db, adapter, payment_id)

        if "payment_method" in values or "payment_method_details" in values:
            method = values.get("payment_method", db_payment.payment_method)
            details = values.get("payment_method_details", db_payment.payment_method_details)
            values["payment_method_details"] = _method_details(adapter, method, details)
            values["payment_method"] = method

        old_status = db_payment.payment_status
        new_status = values.get("payment_status", old_status)
        check_transition(old_status, new_status)

        old_amount = reconciliation.to_money(db_payment.amount)
        new_amount = values.get("amount", old_amount)
        was_counted = adapter.counts_toward_paid(old_status)
        now_counted = adapter.counts_toward_paid(new_status)
        increases_paid = now_counted and (not was_counted or new_amount > old_amount)
        if increases_paid and not payment_in.allow_overpayment:
            current = reconciliation.preview(db, adapter, document, exclude_payment_id=db_payment.id)
            reconciliation.enforce_remaining(adapter, document, new_amount, current)

        payment_store.update(db, db_payment, values, user_id)
        if new_amount != old_amount or new_status != old_status or payment_in.status_label:
            reconciliation.reconcile(db, adapter.document_type, document.id, payment_in.status_label)
        return db_payment, document_state(adapter, document)

    db_payment, state = run_in_transaction(db, work, description=f"Updating {adapter.label} payment {payment_id}")
    db.refresh(db_payment)
    logger.info(f"Payment {payment_id} for {adapter.label} {state.document_number} updated by user {user_id}")
    return db_payment, state


def change_payment_status(
    db: Session, adapter: DocumentAdapter, payment_id: int, payload: PaymentStatusUpdate, user_id: str
) -> Tuple[PaymentRecord, DocumentPaymentState]:
    new_status = payload.payment_status.value

    def work():
        db_payment, document = lock_payment(db, adapter, payment_id)
        old_status = db_payment.payment_status
        check_transition(old_status, new_status)

        if adapter.counts_toward_paid(new_status) and not adapter.counts_toward_paid(old_status):
            current = reconciliation.preview(db, adapter, document, exclude_payment_id=db_payment.id)
            reconciliation.enforce_remaining(adapter, document, db_payment.amount, current)

        values = {"payment_status": new_status}
        if payload.notes is not None:
            values["notes"] = payload.notes
        payment_store.update(db, db_payment, values, user_id)

        if new_status != old_status or payload.status_label:
            reconciliation.reconcile(db, adapter.document_type, document.id, payload.status_label)
        return db_payment, document_state(adapter, document)

    db_payment, state = run_in_transaction(
        db, work, description=f"Changing status of {adapter.label} payment {payment_id}"
    )
    db.refresh(db_payment)
    logger.info(f"Payment {payment_id} status set to '{new_status}' by user {user_id}")
    return db_payment, state


def delete_payment(db: Session, adapter: DocumentAdapter, payment_id: int, user_id: str) -> DocumentPaymentState:
    """Soft-delete a payment; the parent is resynced in the same transaction."""
    def work():
        db_payment, document = lock_payment(db, adapter, payment_id)
        payment_store.delete(db, db_payment, user_id)
        reconciliation.reconcile(db, adapter.document_type, document.id)
        return document_state(adapter, document)

    state = run_in_transaction(db, work, description=f"Deleting {adapter.label} payment {payment_id}")
    logger.info(f"Payment {payment_id} for {adapter.label} {state.document_number} deleted by user {user_id}")
    return state


def reconcile_document(
    db: Session, adapter: DocumentAdapter, document_id: int, status_label: Optional[str] = None
) -> DocumentPaymentState:
    """Resync a document's aggregate from its payments on demand."""
    def work():
        reconciliation.reconcile(db, adapter.document_type, document_id, status_label)
        return document_state(adapter, adapter.load(db, document_id))

    return run_in_transaction(db, work, description=f"Reconciling {adapter.label} {document_id}")


def payment_summary(db: Session, adapter: DocumentAdapter, document_id: int) -> PaymentSummary:
    document = adapter.load(db, document_id)
    payments = payment_store.find_by_parent(db, adapter.document_type, document_id)

    groups = OrderedDict((status.value, []) for status in PaymentStatus)
    for payment in payments:
        groups.setdefault(payment.payment_status, []).append(payment)
    breakdown = [
        PaymentStatusBreakdown(
            payment_status=status,
            count=len(items),
            total_amount=reconciliation.to_money(sum((Decimal(p.amount) for p in items), Decimal("0"))),
        )
        for status, items in groups.items() if items
    ]

    aggregate = reconciliation.compute_aggregate(adapter, document, payments)
    return PaymentSummary(
        document=document_state(adapter, document),
        breakdown=breakdown,
        total_paid=aggregate.paid_amount,
        total_outstanding=aggregate.remaining_amount,
    )
