from decimal import Decimal

import pytest

from crud.document_adapters import (
    ADAPTERS,
    OverpaymentPolicy,
    SettlementStatus,
    get_adapter,
)
from exceptions import NotFoundError
from models.payments import DocumentType


def test_every_document_type_has_an_adapter():
    assert set(ADAPTERS) == set(DocumentType)
    prefixes = [adapter.route_prefix for adapter in ADAPTERS.values()]
    assert len(prefixes) == len(set(prefixes))


def test_lookup_by_value_and_unknown_type():
    assert get_adapter("PurchaseOrder") is ADAPTERS[DocumentType.PURCHASE_ORDER]
    with pytest.raises(NotFoundError):
        get_adapter("DeliveryChallan")


@pytest.mark.parametrize("document_type, total_field, number_field, payer_field", [
    (DocumentType.QUOTATION, "grand_total", "quotation_number", "customer_id"),
    (DocumentType.INVOICE, "total_amount", "invoice_number", "customer_id"),
    (DocumentType.PURCHASE_ORDER, "total_amount", "po_number", "supplier_id"),
    (DocumentType.AMC_INVOICE, "grand_total", "invoice_number", "customer_id"),
    (DocumentType.DG_PROFORMA, "total_amount", "proforma_number", "customer_id"),
])
def test_field_mapping(document_type, total_field, number_field, payer_field):
    adapter = get_adapter(document_type)
    assert adapter.total_field == total_field
    assert adapter.number_field == number_field
    assert adapter.payer_field == payer_field


def test_dg_families_use_title_case_literals():
    for document_type in (DocumentType.DG_QUOTATION, DocumentType.DG_INVOICE, DocumentType.DG_PROFORMA):
        labels = get_adapter(document_type).status_labels
        assert labels[SettlementStatus.PARTIAL] == "Partial"
        assert labels[SettlementStatus.PAID] == "Paid"
    assert get_adapter(DocumentType.DG_PURCHASE_ORDER).status_labels[SettlementStatus.PAID] == "paid"


def test_counted_payment_statuses():
    assert get_adapter(DocumentType.INVOICE).counts_toward_paid("processing")
    assert not get_adapter(DocumentType.AMC_INVOICE).counts_toward_paid("processing")
    assert not get_adapter(DocumentType.DG_INVOICE).counts_toward_paid("processing")
    for adapter in ADAPTERS.values():
        assert adapter.counts_toward_paid("completed")
        assert not adapter.counts_toward_paid("failed")
        assert not adapter.counts_toward_paid("refunded")
        assert not adapter.counts_toward_paid("pending")


def test_only_quotations_soft_warn():
    warn = [a.document_type for a in ADAPTERS.values() if a.overpayment_policy == OverpaymentPolicy.WARN]
    assert warn == [DocumentType.QUOTATION]


def test_held_label_kept_only_when_equivalent():
    invoice = get_adapter(DocumentType.INVOICE)
    assert invoice.status_label(SettlementStatus.PARTIAL, "gst_pending") == "gst_pending"
    assert invoice.status_label(SettlementStatus.PAID, "gst_pending") == "paid"
    assert invoice.status_label(SettlementStatus.PARTIAL, "overdue") == "partial"

    dg_invoice = get_adapter(DocumentType.DG_INVOICE)
    assert dg_invoice.status_label(SettlementStatus.PARTIAL, "GST Pending") == "GST Pending"
    assert dg_invoice.status_label(SettlementStatus.PARTIAL, "gst_pending") == "Partial"

    purchase_order = get_adapter(DocumentType.PURCHASE_ORDER)
    assert purchase_order.status_label(SettlementStatus.PARTIAL, "gst_pending") == "partial"


def test_to_canonical():
    invoice = get_adapter(DocumentType.INVOICE)
    assert invoice.to_canonical("paid") == SettlementStatus.PAID
    assert invoice.to_canonical("gst_pending") == SettlementStatus.PARTIAL
    assert invoice.to_canonical("overdue") is None
    assert get_adapter(DocumentType.DG_QUOTATION).to_canonical("Pending") == SettlementStatus.PENDING


def test_load_raises_not_found(db):
    with pytest.raises(NotFoundError, match="DG Proforma not found"):
        get_adapter(DocumentType.DG_PROFORMA).load(db, 12345)


def test_document_state_reads_through_the_adapter(db, make_document):
    from services.payments import document_state

    adapter = get_adapter(DocumentType.AMC_INVOICE)
    invoice = make_document(DocumentType.AMC_INVOICE, "2500")
    adapter.set_aggregate(invoice, Decimal("1000.00"), Decimal("1500.00"), "partial")

    assert adapter.get_paid(invoice) == Decimal("1000.00")
    assert adapter.get_remaining(invoice) == Decimal("1500.00")
    assert adapter.get_status(invoice) == "partial"

    state = document_state(adapter, invoice)
    assert (state.paid_amount, state.remaining_amount, state.payment_status) == (
        Decimal("1000.00"), Decimal("1500.00"), "partial"
    )
    assert state.total_amount == Decimal("2500.00")
