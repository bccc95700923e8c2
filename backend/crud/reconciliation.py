"""
Payment reconciliation engine.

The paid/remaining/status fields of every billable document are derived
data. They are recomputed here from the document's full payment set (a full
resync, never an add/subtract delta) and written back through the family's
DocumentAdapter. This is the only code path that writes those fields.

A full resync is self-healing: any drift between the stored aggregate and the
payments is corrected on the next call, and the result does not depend on the
order in which payments were recorded.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlalchemy.orm import Session

import config
from crud import payments as payment_store
from crud.document_adapters import DocumentAdapter, OverpaymentPolicy, SettlementStatus, get_adapter
from exceptions import ConflictError

logger = logging.getLogger("reconciliation")

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PaymentAggregate:
    paid_amount: Decimal
    remaining_amount: Decimal
    settlement_status: SettlementStatus
    payment_status: str


def to_money(value) -> Decimal:
    return Decimal(value or 0).quantize(config.MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def settlement_status(paid: Decimal, total: Decimal) -> SettlementStatus:
    """The single threshold rule shared by every document family."""
    if paid == 0:
        return SettlementStatus.PENDING
    if paid >= total:
        return SettlementStatus.PAID
    return SettlementStatus.PARTIAL


def compute_aggregate(adapter: DocumentAdapter, document, payments: Iterable, requested_label: Optional[str] = None) -> PaymentAggregate:
    """Pure computation of a document's aggregate from a payment set."""
    paid = to_money(sum(
        (Decimal(p.amount) for p in payments if adapter.counts_toward_paid(p.payment_status)),
        Decimal("0")
    ))
    total = to_money(adapter.get_total(document))
    remaining = max(ZERO, total - paid)
    canonical = settlement_status(paid, total)
    return PaymentAggregate(
        paid_amount=paid,
        remaining_amount=remaining,
        settlement_status=canonical,
        payment_status=adapter.status_label(canonical, requested_label),
    )


def preview(db: Session, adapter: DocumentAdapter, document, exclude_payment_id: Optional[int] = None) -> PaymentAggregate:
    """Aggregate against current state without writing anything."""
    payments = [
        p for p in payment_store.find_by_parent(db, adapter.document_type, document.id)
        if p.id != exclude_payment_id
    ]
    return compute_aggregate(adapter, document, payments)


def enforce_remaining(adapter: DocumentAdapter, document, amount, current: PaymentAggregate):
    """
    Apply the family's overpayment policy before a payment is persisted.

    BLOCK raises ConflictError naming both amounts; WARN only logs.
    """
    requested = to_money(amount)
    if requested <= current.remaining_amount:
        return
    if adapter.overpayment_policy == OverpaymentPolicy.BLOCK:
        raise ConflictError(
            requested=requested,
            remaining=current.remaining_amount,
            detail=(
                f"Payment amount ({requested}) exceeds remaining amount ({current.remaining_amount}) "
                f"for {adapter.label} {adapter.get_number(document)}."
            ),
        )
    logger.warning(
        f"{adapter.label} {document.id}: payment of {requested} exceeds remaining "
        f"amount {current.remaining_amount}, accepted under soft-warn policy"
    )


def reconcile(db: Session, document_type, parent_document_id: int, requested_label: Optional[str] = None) -> PaymentAggregate:
    """
    Recompute and persist a document's paid amount, remaining amount and status.

    The document row is locked for the rest of the caller's transaction and its
    version column is bumped by the write, so two concurrent reconciliations
    of the same document cannot both commit stale results. Does not commit.

    Args:
        db: Session holding the caller's transaction
        document_type: DocumentType (or its value) of the parent document
        parent_document_id: The parent document's id
        requested_label: Optional held status literal (e.g. ``gst_pending``). When
            omitted, a held label already stored on the document is kept

    Returns:
        The aggregate that was written.
    """
    adapter = get_adapter(document_type)
    document = adapter.load(db, parent_document_id, for_update=True)
    if requested_label is None and adapter.get_status(document) in adapter.held_labels:
        # A stored held label stays for as long as it still applies
        requested_label = adapter.get_status(document)
    payments = payment_store.find_by_parent(db, adapter.document_type, parent_document_id)
    aggregate = compute_aggregate(adapter, document, payments, requested_label)

    adapter.set_aggregate(document, aggregate.paid_amount, aggregate.remaining_amount, aggregate.payment_status)
    db.flush()

    logger.info(
        f"{adapter.label} {parent_document_id} reconciled: paid={aggregate.paid_amount} "
        f"remaining={aggregate.remaining_amount} status='{aggregate.payment_status}'"
    )
    return aggregate
