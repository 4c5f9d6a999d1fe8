"""Shared pytest fixtures: in-memory database and a small rental business."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from rentledger.models import (
    Assessment,
    Base,
    Business,
    Frequency,
    Receipt,
    ReceiptAllocation,
    RentalAgreement,
)
from rentledger.services import create_db_engine


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def business(db_session):
    """Create a rental business."""
    biz = Business(designation="REH", name="Rental Estates Holdings")
    db_session.add(biz)
    db_session.commit()
    return biz


@pytest.fixture
def agreement(db_session, business):
    """Rental agreement active for the whole of 2016."""
    ra = RentalAgreement(
        business_id=business.id,
        rental_start=date(2016, 1, 1),
        rental_stop=date(2016, 12, 31),
    )
    db_session.add(ra)
    db_session.commit()
    return ra


@pytest.fixture
def make_assessment(db_session, business, agreement):
    """Factory inserting assessments directly, bypassing creation checks."""

    def _make(**overrides) -> Assessment:
        fields = {
            "business_id": business.id,
            "rental_agreement_id": agreement.id,
            "amount": Decimal("1000.00"),
            "start": date(2016, 1, 1),
            "stop": date(2016, 12, 31),
            "recurrence": Frequency.MONTHLY,
            "proration": Frequency.DAILY,
            "account_rule": "d 11001 1000.00, c 40001 1000.00",
        }
        fields.update(overrides)
        assessment = Assessment(**fields)
        db_session.add(assessment)
        db_session.commit()
        return assessment

    return _make


@pytest.fixture
def make_receipt(db_session, business, agreement):
    """Factory inserting receipts with (amount, assessment_id, rule) allocations."""

    def _make(receipt_date: date, amount: str, allocations=(), rental_agreement_id=None) -> Receipt:
        receipt = Receipt(
            business_id=business.id,
            rental_agreement_id=rental_agreement_id or agreement.id,
            amount=Decimal(amount),
            receipt_date=receipt_date,
            account_rule="d 10001 _, c 11001 _",
        )
        for alloc_amount, assessment_id, rule in allocations:
            receipt.allocations.append(
                ReceiptAllocation(amount=Decimal(alloc_amount), assessment_id=assessment_id, account_rule=rule)
            )
        db_session.add(receipt)
        db_session.commit()
        return receipt

    return _make
