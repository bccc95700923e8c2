from fpdf import FPDF
from fpdf.enums import XPos, YPos
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
import logging
import threading

import config
from exceptions import ReceiptRenderError, ReceiptTimeoutError
from schemas.receipts import ReceiptView
from utils.formatting import format_amount

logger = logging.getLogger("receipts")

# Renders run off the request thread so a slow render can be abandoned
_render_pool = ThreadPoolExecutor(max_workers=config.RECEIPT_RENDER_WORKERS, thread_name_prefix="receipt-render")
_in_flight = 0
_in_flight_lock = threading.Lock()


def renders_in_flight() -> int:
    """Renders submitted and not yet finished, abandoned ones included."""
    return _in_flight


def _release_slot():
    global _in_flight
    with _in_flight_lock:
        _in_flight -= 1


def _tracked_render(view):
    try:
        return render_payment_receipt(view)
    finally:
        _release_slot()


def _latin1(text) -> str:
    """Core fonts only cover latin-1; anything else is replaced, not fatal."""
    return str(text if text is not None else "").encode("latin-1", "replace").decode("latin-1")


class PDF(FPDF):
    def header(self):
        self.set_font('Helvetica', 'B', 16)
        self.cell(0, 8, _latin1(config.COMPANY_NAME), new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='L')
        self.set_font('Helvetica', '', 9)
        self.multi_cell(0, 5, _latin1(config.COMPANY_ADDRESS), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.cell(0, 5, _latin1(config.COMPANY_CONTACT), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(4)
        self.set_font('Helvetica', 'B', 14)
        self.cell(0, 10, 'PAYMENT RECEIPT', border='TB', new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
        self.ln(4)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.cell(0, 10, f'Page {self.page_no()}', align='C')

    def label_value(self, label: str, value, label_width: float = 50):
        self.set_font('Helvetica', 'B', 10)
        self.cell(label_width, 7, _latin1(label))
        self.set_font('Helvetica', '', 10)
        self.multi_cell(0, 7, _latin1(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def section(self, title: str):
        self.ln(3)
        self.set_font('Helvetica', 'B', 11)
        self.cell(0, 8, _latin1(title), border='B', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(1)


def render_payment_receipt(view: ReceiptView) -> bytes:
    """
    Lay out a payment receipt.

    Args:
        view: The assembled receipt (payment, parent document and payer)

    Returns:
        The PDF document as bytes.
    """
    pdf = PDF()
    pdf.add_page()

    pdf.label_value('Receipt #:', view.receipt_number)
    pdf.label_value('Payment Date:', view.payment_date.strftime('%d-%m-%Y'))
    pdf.label_value('Issued At:', view.issued_at.strftime('%d-%m-%Y %H:%M'))
    pdf.label_value(f'{view.document.label} #:', view.document.number)

    pdf.section('Received From')
    pdf.label_value('Name:', view.payer.name)
    for label, value in (
        ('Contact:', view.payer.contact_name),
        ('Address:', view.payer.address),
        ('Phone:', view.payer.phone),
        ('Email:', view.payer.email),
        ('GSTIN:', view.payer.gst_number),
    ):
        if value:
            pdf.label_value(label, value)

    pdf.section('Payment Details')
    pdf.label_value('Amount:', view.amount_display)
    pdf.label_value('Amount in Words:', view.amount_in_words)
    pdf.label_value('Payment Method:', view.payment_method_label)
    for line in view.method_details:
        pdf.label_value(f'{line.label}:', line.value)
    pdf.label_value('Status:', view.payment_status.capitalize())
    if view.notes:
        pdf.label_value('Notes:', view.notes)

    pdf.section(f'{view.document.label} Summary')
    currency = view.document.currency
    for label, value in (
        ('Total Amount:', view.document.total_amount),
        ('Amount Paid:', view.document.paid_amount),
        ('Balance Due:', view.document.remaining_amount),
    ):
        pdf.set_font('Helvetica', 'B', 10)
        pdf.cell(110, 8, '')
        pdf.cell(40, 8, label, border=1, align='R')
        pdf.set_font('Helvetica', '', 10)
        pdf.cell(40, 8, _latin1(format_amount(value, currency)), border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='R')
    pdf.label_value('Document Status:', view.document.payment_status)

    if view.recorded_by:
        pdf.ln(6)
        pdf.set_font('Helvetica', 'I', 9)
        pdf.cell(0, 6, _latin1(f'Recorded by {view.recorded_by}'), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())


def render_receipt_pdf(view: ReceiptView, timeout: float = None) -> bytes:
    """Render with a deadline; a timeout is ReceiptTimeoutError, anything else ReceiptRenderError."""
    global _in_flight
    timeout = config.RECEIPT_RENDER_TIMEOUT_SECONDS if timeout is None else timeout
    with _in_flight_lock:
        _in_flight += 1
        busy = _in_flight
    if busy > config.RECEIPT_RENDER_WORKERS:
        logger.warning(
            f"Receipt {view.receipt_number} queued: {busy} renders in flight for "
            f"{config.RECEIPT_RENDER_WORKERS} workers"
        )
    future = _render_pool.submit(_tracked_render, view)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        if future.cancel():
            # Never started, so _tracked_render will not release the slot
            _release_slot()
            logger.error(f"Receipt {view.receipt_number} timed out after {timeout}s while queued")
        else:
            logger.error(
                f"Rendering receipt {view.receipt_number} exceeded {timeout}s and is still running; "
                f"{renders_in_flight()} renders in flight"
            )
        raise ReceiptTimeoutError()
    except Exception as e:
        logger.exception(f"Rendering receipt {view.receipt_number} failed")
        raise ReceiptRenderError() from e
