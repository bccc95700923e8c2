#!/usr/bin/env python3
"""
Recompute paid_amount, remaining_amount and payment_status for every billable
document from its payment records.

Each document is reconciled in its own transaction, so one failure does not
roll back the rest. Usage (from backend/):

    python scripts/resync_payment_totals.py [DocumentType ...]
"""

import sys
import os
import logging

# Add the parent directory to sys.path to allow imports from backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session
from crud.document_adapters import ADAPTERS, get_adapter
from crud.reconciliation import reconcile
from database import SessionLocal, run_in_transaction
from exceptions import PaymentError

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger("resync")


def resync_documents(db: Session, adapters=None):
    """
    Reconcile every document of the given families (all families by default).

    Returns:
        (updated, failed) counts.
    """
    updated = 0
    failed = 0
    for adapter in adapters or ADAPTERS.values():
        rows = db.query(adapter.model.id).order_by(adapter.model.id).all()
        for (document_id,) in rows:
            try:
                aggregate = run_in_transaction(
                    db,
                    lambda: reconcile(db, adapter.document_type, document_id),
                    description=f"Resyncing {adapter.label} {document_id}",
                )
            except PaymentError as e:
                failed += 1
                logger.error(f"{adapter.label} {document_id}: resync failed: {e.detail}")
                continue
            updated += 1
            logger.info(
                f"{adapter.label} {document_id}: paid={aggregate.paid_amount} "
                f"remaining={aggregate.remaining_amount} status='{aggregate.payment_status}'"
            )
    return updated, failed


def main(argv):
    adapters = [get_adapter(name) for name in argv] or None
    db = SessionLocal()
    try:
        updated, failed = resync_documents(db, adapters)
    finally:
        db.close()
    logger.info(f"Resynced {updated} documents, {failed} failed.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
