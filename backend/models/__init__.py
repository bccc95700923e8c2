from models.audit_log import AuditLog
from models.business_partners import BusinessPartner
from models.quotations import Quotation, AMCQuotation, DGQuotation
from models.invoices import Invoice, AMCInvoice, DGInvoice, DGProforma
from models.purchase_orders import PurchaseOrder, DGPurchaseOrder
from models.payments import PaymentRecord

__all__ = ['AMCInvoice', 'AMCQuotation', 'AuditLog', 'BusinessPartner', 'DGInvoice', 'DGProforma', 'DGPurchaseOrder', 'DGQuotation', 'Invoice', 'PaymentRecord', 'PurchaseOrder', 'Quotation',]
