"""Unit tests for AssessmentService."""

from datetime import date
from decimal import Decimal

import pytest

from rentledger.models import Assessment, Business, Frequency, RentalAgreement
from rentledger.services.assessment_service import AssessmentService
from rentledger.services.errors import AssessmentValidationError

RULE = "d 11001 1000.00, c 40001 1000.00"


@pytest.fixture
def service(db_session):
    return AssessmentService(db_session)


def _create(service, business, agreement, **overrides):
    fields = {
        "business_id": business.id,
        "rental_agreement_id": agreement.id,
        "amount": Decimal("1000.00"),
        "start": date(2016, 1, 1),
        "stop": date(2016, 12, 31),
        "account_rule": RULE,
        "recurrence": Frequency.MONTHLY,
        "proration": Frequency.DAILY,
    }
    fields.update(overrides)
    return service.create_assessment(**fields)


class TestCreateAssessment:
    """Tests for AssessmentService.create_assessment."""

    def test_creates_assessment(self, service, business, agreement, db_session):
        """Test a valid assessment is persisted with its fields."""
        assessment = _create(service, business, agreement, comment="January rent", rentable_id=3)

        assert assessment.id is not None
        stored = db_session.get(Assessment, assessment.id)
        assert stored.amount == Decimal("1000.00")
        assert stored.recurrence == Frequency.MONTHLY
        assert stored.proration == Frequency.DAILY
        assert stored.account_rule == RULE
        assert stored.rentable_id == 3
        assert stored.comment == "January rent"

    def test_one_time_defaults(self, service, business, agreement):
        """Test recurrence and proration default to one-time."""
        assessment = service.create_assessment(
            business.id, agreement.id, Decimal("75.00"), date(2016, 3, 1), date(2016, 3, 1), "d 11001 75, c 40002 75"
        )

        assert assessment.recurrence == Frequency.ONE_TIME
        assert assessment.proration == Frequency.ONE_TIME

    def test_missing_agreement(self, service, business, agreement):
        with pytest.raises(AssessmentValidationError, match="not found"):
            _create(service, business, agreement, rental_agreement_id=9999)

    def test_agreement_of_another_business(self, service, business, db_session):
        """Test an agreement must belong to the assessment's business."""
        other = Business(designation="ACME", name="Acme Lettings")
        db_session.add(other)
        db_session.commit()
        foreign = RentalAgreement(
            business_id=other.id, rental_start=date(2016, 1, 1), rental_stop=date(2016, 12, 31)
        )
        db_session.add(foreign)
        db_session.commit()

        with pytest.raises(AssessmentValidationError, match="does not belong to business"):
            _create(service, business, foreign)

    def test_zero_amount(self, service, business, agreement):
        with pytest.raises(AssessmentValidationError, match="must be non-zero"):
            _create(service, business, agreement, amount=Decimal("0.00"))

    def test_stop_before_start(self, service, business, agreement):
        with pytest.raises(AssessmentValidationError, match="is before start"):
            _create(service, business, agreement, start=date(2016, 6, 1), stop=date(2016, 5, 31))

    @pytest.mark.parametrize("rule", ["", "   "])
    def test_empty_rule(self, service, business, agreement, rule):
        with pytest.raises(AssessmentValidationError, match="must not be empty"):
            _create(service, business, agreement, account_rule=rule)

    def test_malformed_rule(self, service, business, agreement):
        """Test a rule that does not parse is rejected at creation time."""
        with pytest.raises(AssessmentValidationError, match="Malformed account rule"):
            _create(service, business, agreement, account_rule="d 11001 1000.00, x 40001 1000.00")

    def test_proration_coarser_than_recurrence(self, service, business, agreement):
        """Test monthly proration of a weekly charge is rejected."""
        with pytest.raises(AssessmentValidationError, match="Proration granularity"):
            _create(service, business, agreement, recurrence=Frequency.WEEKLY, proration=Frequency.MONTHLY)

    def test_rejected_assessment_not_persisted(self, service, business, agreement, db_session):
        with pytest.raises(AssessmentValidationError):
            _create(service, business, agreement, amount=Decimal("0"))

        assert db_session.query(Assessment).count() == 0
