"""Journal period management: regeneration and marker lifecycle."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy.orm import Session

from rentledger.models.journal_marker import JournalMarker, MarkerState
from rentledger.services.audit_service import AuditService
from rentledger.services.errors import (
    MalformedRuleError,
    MarkerStateError,
    PersistenceError,
    ProrationPreconditionError,
    UnsupportedRecurrenceError,
)
from rentledger.services.journal_service import JournalService
from rentledger.services.journal_store import JournalStore

logger = logging.getLogger(__name__)

# Allowed forward transitions; ORIGIN and LOCKED are terminal
_NEXT_STATE = {
    MarkerState.OPEN: MarkerState.CLOSED,
    MarkerState.CLOSED: MarkerState.LOCKED,
}


@dataclass
class RegenerationResult:
    """Outcome of one regeneration run."""

    journals_removed: int = 0
    assessments_posted: int = 0
    receipts_posted: int = 0
    skipped: int = 0
    marker_id: int | None = None

    @property
    def journals_created(self) -> int:
        return self.assessments_posted + self.receipts_posted


class JournalPeriodService:
    """Service for journal periods.

    Rebuilds the journal records of a date range from the current assessments
    and receipts, and moves period markers through OPEN -> CLOSED -> LOCKED.
    Callers must serialize regeneration per business; different businesses
    are independent.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = JournalStore(db_session)
        self.journals = JournalService(self.store)

    def regenerate(
        self,
        business_id: int,
        range_start: date,
        range_stop: date,
        actor: str | None = None,
    ) -> RegenerationResult:
        """Delete and rebuild the journal records of [range_start, range_stop).

        Steps:
        1. Remove every journal (allocations first) dated in the range
        2. Delete the latest marker if it is OPEN; protected markers stay
        3. Post each occurrence of every assessment active in the range
        4. Post every receipt dated in the range
        5. Insert an OPEN marker for [range_start, range_stop - 1 day]

        Everything runs in one transaction: it is committed at the end and
        rolled back on any propagated error, leaving the prior state intact.
        Each source record is posted inside its own savepoint; a bad rule, a
        missing rental agreement, a sub-day recurrence or a failed write only
        skips that record and the run continues with the next one.

        Running it twice on unchanged data books identical dates, amounts and
        rules (row ids differ).

        Args:
            business_id: Business to regenerate
            range_start: First day of the range (inclusive)
            range_stop: End of the range (exclusive)
            actor: Operator recorded in the audit log (optional)

        Returns:
            RegenerationResult with counts and the new marker id

        Raises:
            ProrationPreconditionError: If the range spans no whole day
            PersistenceError: If removal, marker or audit writes fail
        """
        if range_stop <= range_start:
            raise ProrationPreconditionError(
                f"Regeneration range {range_start} to {range_stop} must span at least one day"
            )

        result = RegenerationResult()
        try:
            result.journals_removed = self._remove_journal_entries(business_id, range_start, range_stop)
            self._supersede_open_marker(business_id, range_start, range_stop)
            self._post_assessments(business_id, range_start, range_stop, result)
            self._post_receipts(business_id, range_start, range_stop, result)

            marker = JournalMarker(
                business_id=business_id,
                state=MarkerState.OPEN,
                start_date=range_start,
                stop_date=range_stop - timedelta(days=1),
            )
            result.marker_id = self.store.insert_marker(marker)

            AuditService.log(
                self.db,
                "journal_marker",
                result.marker_id,
                "regenerate",
                actor,
                changes={
                    "journals_removed": result.journals_removed,
                    "journals_created": result.journals_created,
                    "skipped": result.skipped,
                },
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                "Regeneration of business %d from %s to %s failed; rolled back",
                business_id,
                range_start,
                range_stop,
            )
            raise

        logger.info(
            "Regenerated business %d from %s to %s: removed=%d assessments=%d receipts=%d skipped=%d",
            business_id,
            range_start,
            range_stop,
            result.journals_removed,
            result.assessments_posted,
            result.receipts_posted,
            result.skipped,
        )
        return result

    def _remove_journal_entries(self, business_id: int, range_start: date, range_stop: date) -> int:
        """Delete journals in the range, allocations before their journal."""
        journals = self.store.query_journals_in_range(business_id, range_start, range_stop)
        for journal in journals:
            self.store.delete_journal_allocations(journal.id)
            self.store.delete_journal(journal.id)
        return len(journals)

    def _supersede_open_marker(self, business_id: int, range_start: date, range_stop: date) -> None:
        """Drop the latest marker if OPEN and warn about protected spans in the range."""
        latest = self.store.get_latest_marker(business_id)
        if latest is not None and not latest.is_protected:
            logger.debug("Deleting open journal marker %d", latest.id)
            self.store.delete_marker(latest.id)

        last_day = range_stop - timedelta(days=1)
        for marker in self.store.list_markers(business_id):
            if marker.state not in (MarkerState.CLOSED, MarkerState.LOCKED):
                continue
            if marker.start_date <= last_day and marker.stop_date >= range_start:
                logger.warning(
                    "Range %s to %s overlaps %s journal marker %d (%s to %s)",
                    range_start,
                    range_stop,
                    marker.state.value,
                    marker.id,
                    marker.start_date,
                    marker.stop_date,
                )

    def _post_assessments(
        self,
        business_id: int,
        range_start: date,
        range_stop: date,
        result: RegenerationResult,
    ) -> None:
        for assessment in self.store.query_assessments_by_business(business_id, range_start, range_stop):
            try:
                occurrences = assessment.occurrences_in_range(range_start, range_stop)
            except UnsupportedRecurrenceError as e:
                logger.warning("Skipping assessment %d: %s", assessment.id, e)
                result.skipped += 1
                continue

            for occurrence in occurrences:
                try:
                    with self.db.begin_nested():
                        self.journals.post_assessment(occurrence, assessment, range_start, range_stop)
                except (MalformedRuleError, ProrationPreconditionError, PersistenceError) as e:
                    logger.error("Skipping assessment %d on %s: %s", assessment.id, occurrence, e)
                    result.skipped += 1
                    continue
                result.assessments_posted += 1

    def _post_receipts(
        self,
        business_id: int,
        range_start: date,
        range_stop: date,
        result: RegenerationResult,
    ) -> None:
        for receipt in self.store.query_receipts_in_range(business_id, range_start, range_stop):
            try:
                with self.db.begin_nested():
                    self.journals.post_receipt(receipt)
            except PersistenceError as e:
                logger.error("Skipping receipt %d on %s: %s", receipt.id, receipt.receipt_date, e)
                result.skipped += 1
                continue
            result.receipts_posted += 1

    # ------------------------------------------------------------------
    # Marker lifecycle
    # ------------------------------------------------------------------

    def get_latest_marker(self, business_id: int) -> JournalMarker | None:
        """Most recent marker of a business, or None."""
        return self.store.get_latest_marker(business_id)

    def list_markers(self, business_id: int) -> list[JournalMarker]:
        return self.store.list_markers(business_id)

    def ensure_origin_marker(self, business_id: int, origin_date: date, actor: str | None = None) -> JournalMarker:
        """Create the business's ORIGIN marker unless one already exists.

        Args:
            business_id: Business to initialize
            origin_date: Dawn-of-time date for the business's books
            actor: Operator recorded in the audit log (optional)

        Returns:
            The existing or newly created ORIGIN marker

        Raises:
            MarkerStateError: If the business already has periods but no origin
        """
        markers = self.store.list_markers(business_id)
        for marker in markers:
            if marker.state == MarkerState.ORIGIN:
                return marker
        if markers:
            # ORIGIN must be the first marker of a business
            raise MarkerStateError(
                f"Business {business_id} already has journal markers; cannot add an origin marker after them"
            )

        marker = JournalMarker(
            business_id=business_id,
            state=MarkerState.ORIGIN,
            start_date=origin_date,
            stop_date=origin_date,
        )
        self.store.insert_marker(marker)
        AuditService.log(self.db, "journal_marker", marker.id, "origin", actor)
        self.db.commit()

        logger.info("Created origin journal marker %d for business %d at %s", marker.id, business_id, origin_date)
        return marker

    def close_marker(self, marker_id: int, actor: str | None = None) -> JournalMarker:
        """Close an OPEN marker so regeneration no longer supersedes it.

        Raises:
            MarkerStateError: If the marker is missing or not OPEN
        """
        return self._transition(marker_id, MarkerState.CLOSED, "close", actor)

    def lock_marker(self, marker_id: int, actor: str | None = None) -> JournalMarker:
        """Lock a CLOSED marker permanently.

        Raises:
            MarkerStateError: If the marker is missing or not CLOSED
        """
        return self._transition(marker_id, MarkerState.LOCKED, "lock", actor)

    def _transition(self, marker_id: int, target: MarkerState, action: str, actor: str | None) -> JournalMarker:
        marker = self.store.get_marker(marker_id)
        if marker is None:
            raise MarkerStateError(f"Journal marker {marker_id} not found")
        if _NEXT_STATE.get(marker.state) != target:
            raise MarkerStateError(
                f"Journal marker {marker_id} is {marker.state.value}; cannot {action} it"
            )

        previous = marker.state
        marker.state = target
        AuditService.log(
            self.db,
            "journal_marker",
            marker.id,
            action,
            actor,
            changes={"from": previous.value, "to": target.value},
        )
        self.db.commit()
        self.db.refresh(marker)

        logger.info("Journal marker %d: %s -> %s", marker.id, previous.value, target.value)
        return marker


__all__ = ["JournalPeriodService", "RegenerationResult"]
