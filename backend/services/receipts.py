"""Assembles the receipt view a payment's PDF is rendered from."""

from sqlalchemy.orm import Session

from crud.document_adapters import DocumentAdapter
from crud.reconciliation import to_money
from exceptions import NotFoundError
from models.audit_mixin import local_now
from models.business_partners import BusinessPartner
from schemas.receipts import ReceiptDocument, ReceiptLine, ReceiptPayer, ReceiptView
from services.payments import get_payment
from utils.formatting import amount_to_words, format_amount
from utils.payment_methods import METHOD_LABELS, describe_payment_method_details


def receipt_number_for(payment) -> str:
    return payment.receipt_number or f"RCPT-{payment.id:06d}"


def assemble_receipt(db: Session, adapter: DocumentAdapter, payment_id: int) -> ReceiptView:
    """
    Join a payment with its parent document and payer.

    Raises NotFoundError when any of the three is missing, before anything
    is rendered.
    """
    db_payment = get_payment(db, adapter, payment_id)
    document = adapter.load(db, db_payment.parent_document_id)
    payer = db.query(BusinessPartner).filter(BusinessPartner.id == db_payment.payer_id).first()
    if payer is None:
        raise NotFoundError("Payer not found")

    amount = to_money(db_payment.amount)
    return ReceiptView(
        receipt_number=receipt_number_for(db_payment),
        payment_id=db_payment.id,
        payment_date=db_payment.payment_date,
        amount=amount,
        currency=db_payment.currency,
        amount_display=format_amount(amount, db_payment.currency),
        amount_in_words=amount_to_words(amount, db_payment.currency),
        payment_method=db_payment.payment_method,
        payment_method_label=METHOD_LABELS.get(db_payment.payment_method, db_payment.payment_method),
        payment_status=db_payment.payment_status,
        method_details=[
            ReceiptLine(label=label, value=value)
            for label, value in describe_payment_method_details(
                db_payment.payment_method, db_payment.payment_method_details
            )
        ],
        notes=db_payment.notes,
        recorded_by=db_payment.created_by,
        issued_at=local_now(),
        document=ReceiptDocument(
            document_type=adapter.document_type.value,
            label=adapter.label,
            number=adapter.get_number(document),
            currency=document.currency,
            total_amount=to_money(adapter.get_total(document)),
            paid_amount=to_money(adapter.get_paid(document)),
            remaining_amount=to_money(adapter.get_remaining(document)),
            payment_status=adapter.get_status(document),
        ),
        payer=ReceiptPayer(
            id=payer.id,
            name=payer.name,
            contact_name=payer.contact_name,
            phone=payer.phone,
            email=payer.email,
            address=payer.address,
            gst_number=payer.gst_number,
        ),
    )
