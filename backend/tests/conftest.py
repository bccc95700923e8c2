import itertools
import os

# Must be set before config/database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_TO_FILE"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from crud.document_adapters import SettlementStatus, get_adapter
from database import Base, SessionLocal, engine, get_db
from main import app
from models.business_partners import BusinessPartner


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def customer(db):
    partner = BusinessPartner(
        name="Anand Textiles",
        contact_name="R. Anand",
        phone="9840012345",
        email="accounts@anandtextiles.in",
        address="12 Mill Road, Coimbatore",
        gst_number="33AABCA1234F1Z5",
        is_customer=True,
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


@pytest.fixture
def supplier(db):
    partner = BusinessPartner(name="Kirloskar Spares", is_supplier=True, is_customer=False)
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


@pytest.fixture
def make_document(db, customer, supplier):
    """Create a billable document of any family with nothing paid yet."""
    counter = itertools.count(1)

    def _make(document_type, total, currency="INR", **extra):
        adapter = get_adapter(document_type)
        payer = supplier if adapter.payer_field == "supplier_id" else customer
        values = {
            adapter.number_field: f"{adapter.route_prefix.upper()}-{next(counter):04d}",
            adapter.payer_field: payer.id,
            adapter.total_field: Decimal(str(total)),
            "currency": currency,
            "paid_amount": Decimal("0"),
            "remaining_amount": Decimal(str(total)),
            "payment_status": adapter.status_labels[SettlementStatus.PENDING],
        }
        values.update(extra)
        document = adapter.model(**values)
        db.add(document)
        db.commit()
        db.refresh(document)
        return document

    return _make
