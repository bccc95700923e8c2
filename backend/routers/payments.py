from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from crud.document_adapters import ADAPTERS, DocumentAdapter
from database import get_db
from schemas.payments import (
    DocumentPaymentState,
    Payment,
    PaymentCreate,
    PaymentDeleted,
    PaymentResult,
    PaymentStatusUpdate,
    PaymentSummary,
    PaymentUpdate,
    ReconcileRequest,
)
from services import payments as payment_service
from services.receipts import assemble_receipt
from utils.receipt_utils import render_receipt_pdf
from utils.request_context import get_user_identifier


def _result(db_payment, state: DocumentPaymentState) -> PaymentResult:
    return PaymentResult.model_validate(db_payment).model_copy(update={"document": state})


def build_payment_router(adapter: DocumentAdapter) -> APIRouter:
    """The uniform payment surface for one document family."""
    router = APIRouter(prefix=f"/{adapter.route_prefix}-payments", tags=[f"{adapter.label} Payments"])
    logger = logging.getLogger(f"payments.{adapter.route_prefix}")

    @router.post("/", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
    def create_payment(
        payment: PaymentCreate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_user_identifier)
    ):
        """Record a payment against a document and resync the document's totals."""
        db_payment, state = payment_service.record_payment(db, adapter, payment, user_id)
        return _result(db_payment, state)

    @router.get("/by-parent/{parent_id}", response_model=List[Payment])
    def get_payments_for_document(parent_id: int, db: Session = Depends(get_db)):
        """Retrieve all payments for one document, newest first."""
        return payment_service.list_payments(db, adapter, parent_id)

    @router.get("/by-parent/{parent_id}/summary", response_model=PaymentSummary)
    def get_payment_summary(parent_id: int, db: Session = Depends(get_db)):
        return payment_service.payment_summary(db, adapter, parent_id)

    @router.post("/by-parent/{parent_id}/reconcile", response_model=DocumentPaymentState)
    def reconcile_document(
        parent_id: int,
        request: Optional[ReconcileRequest] = None,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_user_identifier)
    ):
        """Recompute the document's paid/remaining/status from its payments."""
        state = payment_service.reconcile_document(
            db, adapter, parent_id, request.status_label if request else None
        )
        logger.info(f"{adapter.label} {parent_id} resynced on request of user {user_id}")
        return state

    @router.get("/{payment_id}", response_model=Payment)
    def get_payment(payment_id: int, db: Session = Depends(get_db)):
        return payment_service.get_payment(db, adapter, payment_id)

    @router.put("/{payment_id}", response_model=PaymentResult)
    def update_payment(
        payment_id: int,
        payment: PaymentUpdate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_user_identifier)
    ):
        """Update amount, method, details, status or notes of a payment."""
        db_payment, state = payment_service.update_payment(db, adapter, payment_id, payment, user_id)
        return _result(db_payment, state)

    @router.delete("/{payment_id}", response_model=PaymentDeleted)
    def delete_payment(
        payment_id: int,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_user_identifier)
    ):
        state = payment_service.delete_payment(db, adapter, payment_id, user_id)
        return PaymentDeleted(message="Payment deleted successfully", payment_id=payment_id, document=state)

    @router.put("/{payment_id}/status", response_model=PaymentResult)
    def update_payment_status(
        payment_id: int,
        payload: PaymentStatusUpdate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_user_identifier)
    ):
        db_payment, state = payment_service.change_payment_status(db, adapter, payment_id, payload, user_id)
        return _result(db_payment, state)

    @router.get("/{payment_id}/receipt")
    @router.get("/{payment_id}/pdf", include_in_schema=False)
    def get_payment_receipt(payment_id: int, db: Session = Depends(get_db)):
        """Generate the payment receipt as a PDF."""
        view = assemble_receipt(db, adapter, payment_id)
        pdf_bytes = render_receipt_pdf(view)
        logger.info(f"Receipt {view.receipt_number} generated for payment {payment_id}")
        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": f'inline; filename="{view.receipt_number}.pdf"'},
        )

    return router


routers = [build_payment_router(adapter) for adapter in ADAPTERS.values()]
