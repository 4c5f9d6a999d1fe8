"""Assessment service: validated creation of charges."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from rentledger.models.assessment import Assessment, Frequency
from rentledger.services.account_rule import parse_account_rule
from rentledger.services.errors import AssessmentValidationError, MalformedRuleError, RecordNotFoundError
from rentledger.services.journal_store import JournalStore

logger = logging.getLogger(__name__)


class AssessmentService:
    """Creates assessments, rejecting ones the journal engine could not book."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = JournalStore(db_session)

    def create_assessment(
        self,
        business_id: int,
        rental_agreement_id: int,
        amount: Decimal,
        start: date,
        stop: date,
        account_rule: str,
        recurrence: Frequency = Frequency.ONE_TIME,
        proration: Frequency = Frequency.ONE_TIME,
        rentable_id: int | None = None,
        comment: str | None = None,
    ) -> Assessment:
        """Validate and insert a new assessment.

        Args:
            business_id: Owning business
            rental_agreement_id: Agreement the charge is made under
            amount: Nominal amount per recurrence (non-zero)
            start: First date of the assessment
            stop: Last date of the assessment (on or after start)
            account_rule: Allocation expression (must parse)
            recurrence: How often the charge recurs
            proration: Proration granularity, finer than or equal to recurrence
            rentable_id: Rentable the charge applies to (optional)
            comment: Free-form note (optional)

        Returns:
            Created Assessment object

        Raises:
            AssessmentValidationError: If any field is invalid
        """
        try:
            agreement = self.store.get_rental_agreement(rental_agreement_id)
        except RecordNotFoundError as e:
            raise AssessmentValidationError(str(e)) from e
        if agreement.business_id != business_id:
            raise AssessmentValidationError(
                f"Rental agreement {rental_agreement_id} does not belong to business {business_id}"
            )

        amount = Decimal(str(amount))
        if amount == 0:
            raise AssessmentValidationError("Assessment amount must be non-zero")

        if stop < start:
            raise AssessmentValidationError(f"Assessment stop {stop} is before start {start}")

        if not account_rule or not account_rule.strip():
            raise AssessmentValidationError("Assessment account rule must not be empty")
        try:
            parse_account_rule(account_rule)
        except MalformedRuleError as e:
            raise AssessmentValidationError(str(e)) from e

        if proration.granularity > recurrence.granularity:
            raise AssessmentValidationError(
                f"Proration granularity ({proration.value}) must be at least as fine as "
                f"the recurrence ({recurrence.value})"
            )

        assessment = Assessment(
            business_id=business_id,
            rental_agreement_id=rental_agreement_id,
            rentable_id=rentable_id,
            amount=amount,
            start=start,
            stop=stop,
            recurrence=recurrence,
            proration=proration,
            account_rule=account_rule.strip(),
            comment=comment,
        )
        self.db.add(assessment)
        self.db.commit()
        self.db.refresh(assessment)

        logger.info(
            "Created assessment %d: business=%d amount=%s %s from %s to %s",
            assessment.id,
            business_id,
            amount,
            recurrence.value,
            start,
            stop,
        )
        return assessment


__all__ = ["AssessmentService"]
