from decimal import Decimal

from models.audit_log import AuditLog
from models.payments import DocumentType, PaymentRecord

CHEQUE_DETAILS = {"cheque": {"chequeNumber": "004512", "bankName": "Indian Bank", "issueDate": "2026-10-05"}}


def _pay(client, prefix, parent_id, amount, method="cash", details=None, **extra):
    body = {
        "parentId": parent_id,
        "amount": str(amount),
        "paymentMethod": method,
        "paymentMethodDetails": details if details is not None else {},
        "paymentDate": "2026-10-10",
    }
    body.update(extra)
    return client.post(f"/{prefix}-payments/", json=body)


def _money(value):
    return Decimal(str(value))


def test_two_payments_then_delete(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "10000")

    first = _pay(client, "invoice", invoice.id, 4000)
    assert first.status_code == 201
    body = first.json()
    assert body["paymentStatus"] == "completed"
    assert body["documentNumber"] == invoice.invoice_number
    assert body["paymentMethodDetails"] == {"cash": {}}
    assert _money(body["document"]["paidAmount"]) == Decimal("4000")
    assert _money(body["document"]["remainingAmount"]) == Decimal("6000")
    assert body["document"]["paymentStatus"] == "partial"

    second = _pay(client, "invoice", invoice.id, 6000, "upi", {"upi": {"upiId": "anand@okhdfc"}})
    assert second.status_code == 201
    assert second.json()["document"]["paymentStatus"] == "paid"
    assert _money(second.json()["document"]["remainingAmount"]) == Decimal("0")

    deleted = client.delete(f"/invoice-payments/{body['id']}")
    assert deleted.status_code == 200
    document = deleted.json()["document"]
    assert _money(document["paidAmount"]) == Decimal("6000")
    assert _money(document["remainingAmount"]) == Decimal("4000")
    assert document["paymentStatus"] == "partial"

    listed = client.get(f"/invoice-payments/by-parent/{invoice.id}")
    assert [p["id"] for p in listed.json()] == [second.json()["id"]]
    assert invoice.paid_amount == Decimal("6000")


def test_overpayment_is_blocked_and_nothing_persisted(client, db, make_document):
    order = make_document(DocumentType.PURCHASE_ORDER, "1000")

    response = _pay(client, "purchase-order", order.id, 1500)
    assert response.status_code == 409
    assert "1500.00" in response.json()["detail"]
    assert "1000.00" in response.json()["detail"]

    assert db.query(PaymentRecord).count() == 0
    assert order.paid_amount == Decimal("0")
    assert order.payment_status == "pending"


def test_overpayment_override(client, make_document):
    order = make_document(DocumentType.PURCHASE_ORDER, "1000")
    response = _pay(client, "purchase-order", order.id, 1500, allowOverpayment=True)
    assert response.status_code == 201
    assert response.json()["document"]["paymentStatus"] == "paid"
    assert _money(response.json()["document"]["remainingAmount"]) == Decimal("0")


def test_quotation_overpayment_only_warns(client, make_document):
    quotation = make_document(DocumentType.QUOTATION, "1000")
    response = _pay(client, "quotation", quotation.id, 1500)
    assert response.status_code == 201
    assert _money(response.json()["document"]["paidAmount"]) == Decimal("1500")
    assert response.json()["document"]["paymentStatus"] == "paid"


def test_create_then_delete_restores_document(client, make_document):
    invoice = make_document(DocumentType.DG_INVOICE, "5000")
    _pay(client, "dg-invoice", invoice.id, 1200)
    before = (invoice.paid_amount, invoice.remaining_amount, invoice.payment_status)

    created = _pay(client, "dg-invoice", invoice.id, 800, "cheque", CHEQUE_DETAILS)
    assert created.json()["document"]["paymentStatus"] == "Partial"
    client.delete(f"/dg-invoice-payments/{created.json()['id']}")

    assert (invoice.paid_amount, invoice.remaining_amount, invoice.payment_status) == before


def test_every_mutation_is_audited(client, db, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    payment_id = _pay(client, "invoice", invoice.id, 100).json()["id"]
    client.put(f"/invoice-payments/{payment_id}", json={"notes": "bank slip attached"}, headers={"X-User-ID": "priya"})
    client.delete(f"/invoice-payments/{payment_id}")

    actions = [row.action for row in db.query(AuditLog).order_by(AuditLog.id).all()]
    assert actions == ["CREATE", "UPDATE", "DELETE"]
    update = db.query(AuditLog).filter(AuditLog.action == "UPDATE").one()
    assert update.changed_by == "priya"
    assert update.new_values["notes"] == "bank slip attached"


def test_missing_cheque_fields(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    response = _pay(client, "invoice", invoice.id, 100, "cheque", {"cheque": {"chequeNumber": "1"}})
    assert response.status_code == 400
    assert response.json()["detail"] == "Cheque payment requires bank name, issue date"


def test_quotation_requires_full_bank_transfer(client, make_document):
    quotation = make_document(DocumentType.QUOTATION, "1000")
    partial_details = {"bank_transfer": {"transferDate": "2026-10-02"}}
    assert _pay(client, "quotation", quotation.id, 100, "bank_transfer", partial_details).status_code == 400

    invoice = make_document(DocumentType.INVOICE, "1000")
    response = _pay(client, "invoice", invoice.id, 100, "bank_transfer", partial_details)
    assert response.status_code == 201
    assert response.json()["paymentMethodDetails"] == {"bankTransfer": {"transferDate": "2026-10-02"}}


def test_invalid_input_is_400(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    assert _pay(client, "invoice", invoice.id, 0).status_code == 400
    assert _pay(client, "invoice", invoice.id, -5).status_code == 400

    unknown = _pay(client, "invoice", invoice.id, 100, "crypto")
    assert unknown.status_code == 400
    assert unknown.json()["detail"] == "Invalid payment method 'crypto'"

    missing_amount = client.post("/invoice-payments/", json={"parentId": invoice.id, "paymentMethod": "cash"})
    assert missing_amount.status_code == 400
    assert "amount" in missing_amount.json()["detail"]


def test_currency_rules(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    assert _pay(client, "invoice", invoice.id, 100, currency="JPY").status_code == 400
    mismatch = _pay(client, "invoice", invoice.id, 100, currency="USD")
    assert mismatch.status_code == 400
    assert "does not match" in mismatch.json()["detail"]

    usd_invoice = make_document(DocumentType.INVOICE, "1000", currency="USD")
    response = _pay(client, "invoice", usd_invoice.id, 100)
    assert response.status_code == 201
    assert response.json()["currency"] == "USD"


def test_not_found(client, make_document):
    missing_parent = _pay(client, "invoice", 9999, 100)
    assert missing_parent.status_code == 404
    assert missing_parent.json()["detail"] == "Invoice not found"

    invoice = make_document(DocumentType.INVOICE, "1000")
    assert _pay(client, "invoice", invoice.id, 100, payerId=9999).status_code == 404
    assert client.get("/invoice-payments/9999").status_code == 404
    assert client.get("/invoice-payments/by-parent/9999").status_code == 404

    payment_id = _pay(client, "invoice", invoice.id, 100).json()["id"]
    assert client.get(f"/invoice-payments/{payment_id}").status_code == 200
    # A payment is only reachable through its own family's routes
    assert client.get(f"/quotation-payments/{payment_id}").status_code == 404


def test_status_transitions_drive_the_aggregate(client, make_document):
    invoice = make_document(DocumentType.AMC_INVOICE, "1000")
    created = _pay(client, "amc-invoice", invoice.id, 500, paymentStatus="pending")
    assert created.status_code == 201
    assert created.json()["document"]["paymentStatus"] == "pending"
    payment_id = created.json()["id"]

    processing = client.put(f"/amc-invoice-payments/{payment_id}/status", json={"paymentStatus": "processing"})
    assert processing.json()["document"]["paymentStatus"] == "pending"

    completed = client.put(f"/amc-invoice-payments/{payment_id}/status", json={"paymentStatus": "completed"})
    assert completed.status_code == 200
    assert _money(completed.json()["document"]["paidAmount"]) == Decimal("500")
    assert completed.json()["document"]["paymentStatus"] == "partial"

    refunded = client.put(f"/amc-invoice-payments/{payment_id}/status", json={"paymentStatus": "refunded"})
    assert _money(refunded.json()["document"]["paidAmount"]) == Decimal("0")
    assert refunded.json()["document"]["paymentStatus"] == "pending"

    illegal = client.put(f"/amc-invoice-payments/{payment_id}/status", json={"paymentStatus": "completed"})
    assert illegal.status_code == 400
    assert "refunded" in illegal.json()["detail"]


def test_processing_counts_for_sales_invoices(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    response = _pay(client, "invoice", invoice.id, 300, paymentStatus="processing")
    assert _money(response.json()["document"]["paidAmount"]) == Decimal("300")
    assert response.json()["document"]["paymentStatus"] == "partial"


def test_update_amount_resyncs_and_guards_overpayment(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "10000")
    payment_id = _pay(client, "invoice", invoice.id, 4000).json()["id"]

    lowered = client.put(f"/invoice-payments/{payment_id}", json={"amount": "3000"})
    assert lowered.status_code == 200
    assert _money(lowered.json()["document"]["paidAmount"]) == Decimal("3000")

    # Remaining is computed without the payment being edited
    raised = client.put(f"/invoice-payments/{payment_id}", json={"amount": "10000"})
    assert raised.status_code == 200
    assert raised.json()["document"]["paymentStatus"] == "paid"

    too_much = client.put(f"/invoice-payments/{payment_id}", json={"amount": "12000"})
    assert too_much.status_code == 409
    assert invoice.paid_amount == Decimal("10000")


def test_update_method_revalidates_details(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    payment_id = _pay(client, "invoice", invoice.id, 100).json()["id"]

    rejected = client.put(f"/invoice-payments/{payment_id}", json={"paymentMethod": "cheque"})
    assert rejected.status_code == 400

    accepted = client.put(
        f"/invoice-payments/{payment_id}",
        json={"paymentMethod": "cheque", "paymentMethodDetails": CHEQUE_DETAILS},
    )
    assert accepted.status_code == 200
    assert accepted.json()["paymentMethodDetails"] == CHEQUE_DETAILS


def test_held_status_label(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    first = _pay(client, "invoice", invoice.id, 400, statusLabel="gst_pending")
    assert first.json()["document"]["paymentStatus"] == "gst_pending"

    second = _pay(client, "invoice", invoice.id, 600, statusLabel="gst_pending")
    assert second.json()["document"]["paymentStatus"] == "paid"


def test_summary_and_reconcile(client, db, make_document):
    invoice = make_document(DocumentType.INVOICE, "10000")
    _pay(client, "invoice", invoice.id, 2000)
    _pay(client, "invoice", invoice.id, 3000)
    _pay(client, "invoice", invoice.id, 1000, paymentStatus="pending")

    summary = client.get(f"/invoice-payments/by-parent/{invoice.id}/summary").json()
    breakdown = {row["paymentStatus"]: row for row in summary["breakdown"]}
    assert breakdown["completed"]["count"] == 2
    assert _money(breakdown["completed"]["totalAmount"]) == Decimal("5000")
    assert breakdown["pending"]["count"] == 1
    assert _money(summary["totalPaid"]) == Decimal("5000")
    assert _money(summary["totalOutstanding"]) == Decimal("5000")

    invoice.paid_amount = Decimal("1")
    invoice.payment_status = "pending"
    db.commit()

    reconciled = client.post(f"/invoice-payments/by-parent/{invoice.id}/reconcile", json={"statusLabel": "gst_pending"})
    assert reconciled.status_code == 200
    assert _money(reconciled.json()["paidAmount"]) == Decimal("5000")
    assert reconciled.json()["paymentStatus"] == "gst_pending"

    assert client.post("/invoice-payments/by-parent/9999/reconcile").status_code == 404


def test_receipt_pdf(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "10000")
    payment_id = _pay(client, "invoice", invoice.id, 4000, "cheque", CHEQUE_DETAILS).json()["id"]

    for suffix in ("receipt", "pdf"):
        response = client.get(f"/invoice-payments/{payment_id}/{suffix}")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert f"RCPT-{payment_id:06d}" in response.headers["content-disposition"]

    assert client.get("/invoice-payments/9999/receipt").status_code == 404


def test_payment_cannot_be_recorded_as_failed_or_refunded(client, db, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    for status in ("failed", "refunded"):
        response = _pay(client, "invoice", invoice.id, 100, paymentStatus=status)
        assert response.status_code == 400
        assert f"'{status}'" in response.json()["detail"]
    assert db.query(PaymentRecord).count() == 0

    assert _pay(client, "invoice", invoice.id, 100, paymentStatus="processing").status_code == 201


def test_amount_precision_is_bounded(client, db, make_document):
    quotation = make_document(DocumentType.QUOTATION, "1000")
    assert _pay(client, "quotation", quotation.id, "100.005").status_code == 400
    assert _pay(client, "quotation", quotation.id, "123456789012345.67").status_code == 400
    assert db.query(PaymentRecord).count() == 0

    accepted = _pay(client, "quotation", quotation.id, "100.50")
    assert accepted.status_code == 201
    assert _money(accepted.json()["amount"]) == Decimal("100.50")

    payment_id = accepted.json()["id"]
    assert client.put(f"/quotation-payments/{payment_id}", json={"amount": "100.005"}).status_code == 400
    assert client.put(f"/quotation-payments/{payment_id}", json={"amount": "0"}).status_code == 400


def test_stored_held_label_survives_unlabelled_changes(client, make_document):
    invoice = make_document(DocumentType.INVOICE, "1000")
    _pay(client, "invoice", invoice.id, 300, statusLabel="gst_pending")

    second = _pay(client, "invoice", invoice.id, 200)
    assert second.json()["document"]["paymentStatus"] == "gst_pending"

    deleted = client.delete(f"/invoice-payments/{second.json()['id']}")
    assert deleted.json()["document"]["paymentStatus"] == "gst_pending"

    reconciled = client.post(f"/invoice-payments/by-parent/{invoice.id}/reconcile", json={})
    assert reconciled.json()["paymentStatus"] == "gst_pending"

    settled = _pay(client, "invoice", invoice.id, 700)
    assert settled.json()["document"]["paymentStatus"] == "paid"
