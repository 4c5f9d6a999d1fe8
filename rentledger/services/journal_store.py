"""Data access for the journal engine.

All reads and writes the engine performs go through JournalStore, which wraps
an explicit SQLAlchemy session. Inserts flush to obtain ids but never commit;
the caller owns the transaction.
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from rentledger.models.assessment import Assessment
from rentledger.models.business import Business
from rentledger.models.journal import Journal, JournalAllocation
from rentledger.models.journal_marker import JournalMarker
from rentledger.models.receipt import Receipt
from rentledger.models.rental_agreement import RentalAgreement
from rentledger.services.errors import PersistenceError, RecordNotFoundError

logger = logging.getLogger(__name__)


class JournalStore:
    """Session-backed implementation of the journal engine's data-access contracts."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate SQLAlchemy failures into PersistenceError."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("%s failed: %s", operation, e)
            raise PersistenceError(f"{operation} failed: {e}") from e

    # ------------------------------------------------------------------
    # Journals
    # ------------------------------------------------------------------

    def query_journals_in_range(self, business_id: int, start: date, stop: date) -> list[Journal]:
        """Journals of a business dated in [start, stop), oldest first."""
        with self._guard("query journals"):
            return list(
                self.db.scalars(
                    select(Journal)
                    .where(
                        Journal.business_id == business_id,
                        Journal.journal_date >= start,
                        Journal.journal_date < stop,
                    )
                    .order_by(Journal.journal_date, Journal.id)
                )
            )

    def delete_journal_allocations(self, journal_id: int) -> int:
        """Delete all allocations of a journal. Returns the number of rows removed."""
        with self._guard(f"delete allocations of journal {journal_id}"):
            result = self.db.execute(
                delete(JournalAllocation).where(JournalAllocation.journal_id == journal_id)
            )
            return result.rowcount

    def delete_journal(self, journal_id: int) -> None:
        with self._guard(f"delete journal {journal_id}"):
            self.db.execute(delete(Journal).where(Journal.id == journal_id))

    def insert_journal(self, journal: Journal) -> int:
        """Add a journal and flush. Returns its id."""
        with self._guard("insert journal"):
            self.db.add(journal)
            self.db.flush()
            return journal.id

    def insert_journal_allocation(self, allocation: JournalAllocation) -> int:
        """Add a journal allocation and flush. Returns its id."""
        with self._guard(f"insert allocation for journal {allocation.journal_id}"):
            self.db.add(allocation)
            self.db.flush()
            return allocation.id

    # ------------------------------------------------------------------
    # Source records
    # ------------------------------------------------------------------

    def query_assessments_by_business(self, business_id: int, start: date, stop: date) -> list[Assessment]:
        """Assessments of a business active at some point in [start, stop)."""
        with self._guard("query assessments"):
            return list(
                self.db.scalars(
                    select(Assessment)
                    .where(
                        Assessment.business_id == business_id,
                        Assessment.start < stop,
                        Assessment.stop >= start,
                    )
                    .order_by(Assessment.start, Assessment.id)
                )
            )

    def query_receipts_in_range(self, business_id: int, start: date, stop: date) -> list[Receipt]:
        """Receipts of a business dated in [start, stop) with allocations loaded, oldest first."""
        with self._guard("query receipts"):
            return list(
                self.db.scalars(
                    select(Receipt)
                    .options(selectinload(Receipt.allocations))
                    .where(
                        Receipt.business_id == business_id,
                        Receipt.receipt_date >= start,
                        Receipt.receipt_date < stop,
                    )
                    .order_by(Receipt.receipt_date, Receipt.id)
                )
            )

    def get_rental_agreement(self, rental_agreement_id: int) -> RentalAgreement:
        """Load a rental agreement.

        Raises:
            RecordNotFoundError: If the agreement does not exist
        """
        with self._guard(f"load rental agreement {rental_agreement_id}"):
            agreement = self.db.get(RentalAgreement, rental_agreement_id)
        if agreement is None:
            raise RecordNotFoundError(f"Rental agreement {rental_agreement_id} not found")
        return agreement

    def get_business_by_designation(self, designation: str) -> Business | None:
        with self._guard(f"load business {designation}"):
            return self.db.scalars(select(Business).where(Business.designation == designation)).first()

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    def get_latest_marker(self, business_id: int) -> JournalMarker | None:
        """Most recently created marker of a business, or None if it has none."""
        with self._guard("load latest journal marker"):
            return self.db.scalars(
                select(JournalMarker)
                .where(JournalMarker.business_id == business_id)
                .order_by(JournalMarker.id.desc())
                .limit(1)
            ).first()

    def get_marker(self, marker_id: int) -> JournalMarker | None:
        with self._guard(f"load journal marker {marker_id}"):
            return self.db.get(JournalMarker, marker_id)

    def list_markers(self, business_id: int) -> list[JournalMarker]:
        """All markers of a business in creation order."""
        with self._guard("list journal markers"):
            return list(
                self.db.scalars(
                    select(JournalMarker)
                    .where(JournalMarker.business_id == business_id)
                    .order_by(JournalMarker.id)
                )
            )

    def delete_marker(self, marker_id: int) -> None:
        with self._guard(f"delete journal marker {marker_id}"):
            self.db.execute(delete(JournalMarker).where(JournalMarker.id == marker_id))

    def insert_marker(self, marker: JournalMarker) -> int:
        """Add a marker and flush. Returns its id."""
        with self._guard("insert journal marker"):
            self.db.add(marker)
            self.db.flush()
            return marker.id


__all__ = ["JournalStore"]
