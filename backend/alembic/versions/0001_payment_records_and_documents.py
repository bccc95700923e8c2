"""payment records and billable document aggregates

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# table, number column, partner column, date column, total column, default status
DOCUMENT_TABLES = [
    ('quotations', 'quotation_number', 'customer_id', 'issue_date', 'grand_total', 'pending'),
    ('amc_quotations', 'quotation_number', 'customer_id', 'issue_date', 'grand_total', 'pending'),
    ('dg_quotations', 'quotation_number', 'customer_id', 'issue_date', 'grand_total', 'Pending'),
    ('invoices', 'invoice_number', 'customer_id', 'invoice_date', 'total_amount', 'pending'),
    ('amc_invoices', 'invoice_number', 'customer_id', 'invoice_date', 'grand_total', 'pending'),
    ('dg_invoices', 'invoice_number', 'customer_id', 'invoice_date', 'total_amount', 'Pending'),
    ('dg_proformas', 'proforma_number', 'customer_id', 'proforma_date', 'total_amount', 'Pending'),
    ('purchase_orders', 'po_number', 'supplier_id', 'order_date', 'total_amount', 'pending'),
    ('dg_purchase_orders', 'po_number', 'supplier_id', 'order_date', 'total_amount', 'pending'),
]

INVOICE_TABLES = {'invoices', 'amc_invoices', 'dg_invoices'}


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'business_partners',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('contact_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('gst_number', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Active'),
        sa.Column('is_supplier', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_customer', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_business_partners_id', 'business_partners', ['id'])

    for table, number_col, partner_col, date_col, total_col, status in DOCUMENT_TABLES:
        extra = [sa.Column('due_date', sa.Date(), nullable=True)] if table in INVOICE_TABLES else []
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column(number_col, sa.String(), nullable=False),
            sa.Column(partner_col, sa.Integer(), sa.ForeignKey('business_partners.id'), nullable=False),
            sa.Column(date_col, sa.Date(), nullable=True),
            *extra,
            sa.Column('currency', sa.String(length=3), nullable=False, server_default='INR'),
            sa.Column(total_col, sa.Numeric(12, 2), nullable=False, server_default='0'),
            sa.Column('paid_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
            sa.Column('remaining_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
            sa.Column('payment_status', sa.String(length=30), nullable=False, server_default=status),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
            *_timestamps(),
        )
        op.create_index(f'ix_{table}_id', table, ['id'])
        op.create_index(f'ix_{table}_{number_col}', table, [number_col], unique=True)

    op.create_table(
        'payment_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('parent_document_type', sa.String(length=30), nullable=False),
        sa.Column('parent_document_id', sa.Integer(), nullable=False),
        sa.Column('document_number', sa.String(), nullable=False),
        sa.Column('payer_id', sa.Integer(), sa.ForeignKey('business_partners.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='INR'),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('payment_method_details', sa.JSON(), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='completed'),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('receipt_number', sa.String(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
        sa.CheckConstraint('amount > 0', name='ck_payment_records_amount_positive'),
    )
    op.create_index('ix_payment_records_id', 'payment_records', ['id'])
    op.create_index('ix_payment_records_parent', 'payment_records', ['parent_document_type', 'parent_document_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])


def downgrade() -> None:
    op.drop_table('audit_log')
    op.drop_table('payment_records')
    for table, *_ in reversed(DOCUMENT_TABLES):
        op.drop_table(table)
    op.drop_table('business_partners')
