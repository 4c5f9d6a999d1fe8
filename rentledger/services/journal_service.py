"""Journal entry generation for assessments and receipts."""

import logging
from datetime import date
from decimal import Decimal

from rentledger.models.assessment import Assessment, Frequency
from rentledger.models.journal import Journal, JournalAllocation, JournalType
from rentledger.models.receipt import Receipt
from rentledger.services.account_rule import format_account_rule, parse_account_rule
from rentledger.services.allocation_balancer import AllocationBalancer
from rentledger.services.errors import PersistenceError
from rentledger.services.journal_store import JournalStore
from rentledger.services.proration import compute_factor

logger = logging.getLogger(__name__)


class JournalService:
    """Books assessments and receipts as journal entries.

    Every write goes through the supplied JournalStore; nothing is committed
    here, so a caller can group many postings into one transaction.
    """

    def __init__(self, store: JournalStore, balancer: AllocationBalancer | None = None):
        """Initialize with a journal store and an optional balancer."""
        self.store = store
        self.balancer = balancer or AllocationBalancer()

    def post_assessment(
        self,
        occurrence_date: date,
        assessment: Assessment,
        range_start: date,
        range_stop: date,
    ) -> int:
        """Create the journal entry for one occurrence of an assessment.

        The rule amounts are prorated to the part of [range_start, range_stop)
        during which the rental agreement is active. When proration applies,
        the rounded lines are forced to balance and their debit total becomes
        the booked amount.

        Args:
            occurrence_date: Date the assessment falls due
            assessment: Source assessment
            range_start: Start of the billing range (inclusive)
            range_stop: End of the billing range (exclusive)

        Returns:
            Id of the created journal

        Raises:
            MalformedRuleError: If the account rule cannot be parsed (nothing is written)
            ProrationPreconditionError: If the range spans no whole day
            RecordNotFoundError: If the rental agreement does not exist
            PersistenceError: If a write fails
        """
        agreement = self.store.get_rental_agreement(assessment.rental_agreement_id)

        proration = compute_factor(
            assessment.start,
            assessment.stop,
            agreement.rental_start,
            agreement.rental_stop,
            range_start,
            range_stop,
            prorate=assessment.proration != Frequency.ONE_TIME,
        )

        allocations = parse_account_rule(assessment.account_rule, proration.factor)
        balance = self.balancer.net_balance(allocations)
        amount = balance.total_debits

        if proration.factor < 1:
            balanced = self.balancer.correct_rounding(allocations)
            allocations = balanced.allocations
            amount = balanced.total_debits
        elif balance.net != 0:
            logger.warning(
                "Assessment %d account rule is unbalanced by %s: %s",
                assessment.id,
                balance.net,
                assessment.account_rule,
            )

        journal = Journal(
            business_id=assessment.business_id,
            rental_agreement_id=assessment.rental_agreement_id,
            journal_date=occurrence_date,
            amount=amount,
            journal_type=JournalType.ASSESSMENT,
            source_id=assessment.id,
        )
        journal_id = self.store.insert_journal(journal)

        canonical_rule = format_account_rule(allocations)
        try:
            self.store.insert_journal_allocation(
                JournalAllocation(
                    journal_id=journal_id,
                    assessment_id=assessment.id,
                    amount=amount,
                    account_rule=canonical_rule,
                )
            )
        except PersistenceError:
            logger.error(
                "Journal %d for assessment %d written without its allocation",
                journal_id,
                assessment.id,
            )
            raise

        logger.debug(
            "Booked assessment %d on %s: amount=%s factor=%s rule=%s",
            assessment.id,
            occurrence_date,
            amount,
            proration.factor,
            canonical_rule,
        )
        return journal_id

    def post_receipt(self, receipt: Receipt) -> int:
        """Create the journal entry for a receipt.

        Receipts are booked at face value with no proration or rounding; each
        receipt allocation is copied verbatim.

        Args:
            receipt: Source receipt with allocations loaded

        Returns:
            Id of the created journal

        Raises:
            PersistenceError: If a write fails
        """
        journal = Journal(
            business_id=receipt.business_id,
            rental_agreement_id=receipt.rental_agreement_id,
            journal_date=receipt.receipt_date,
            amount=receipt.amount,
            journal_type=JournalType.RECEIPT,
            source_id=receipt.id,
        )
        journal_id = self.store.insert_journal(journal)

        allocated = Decimal(0)
        for receipt_allocation in receipt.allocations:
            self.store.insert_journal_allocation(
                JournalAllocation(
                    journal_id=journal_id,
                    assessment_id=receipt_allocation.assessment_id,
                    amount=receipt_allocation.amount,
                    account_rule=receipt_allocation.account_rule,
                )
            )
            allocated += receipt_allocation.amount

        if receipt.allocations and allocated != receipt.amount:
            logger.info(
                "Receipt %d allocations total %s of %s received",
                receipt.id,
                allocated,
                receipt.amount,
            )

        logger.debug("Booked receipt %d on %s: amount=%s", receipt.id, receipt.receipt_date, receipt.amount)
        return journal_id


__all__ = ["JournalService"]
