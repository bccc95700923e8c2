from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz

import config


def local_now():
    return datetime.now(pytz.timezone(config.APP_TIMEZONE))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    This is the minimal mixin used for the billable documents. It does NOT include
    soft-delete columns; documents are owned by the quotation/invoice workflows.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=local_now)
    updated_at = Column(DateTime(timezone=True), onupdate=local_now)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft-delete columns (deleted_at, deleted_by).

    Payment records use it: a deleted payment stays in the table for the audit
    trail but disappears from every ORM select (see database.add_soft_delete_filter).
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft-delete, for financial records."""
    pass
