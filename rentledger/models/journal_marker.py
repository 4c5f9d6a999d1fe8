"""Journal marker ORM model: period boundaries gating regeneration."""

from datetime import date
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models import Base, BaseModel


class MarkerState(str, Enum):
    """State of a journal period marker.

    OPEN -> CLOSED -> LOCKED, forward only. ORIGIN is the dawn-of-time marker
    and never changes.
    """

    OPEN = "open"
    CLOSED = "closed"
    LOCKED = "locked"
    ORIGIN = "origin"


class JournalMarker(Base, BaseModel):
    """Model representing a booked period [start_date, stop_date] for a business.

    Only the latest marker of a business may be OPEN, and only an OPEN marker is
    ever deleted (it is superseded by the next regeneration).
    """

    __tablename__ = "journal_markers"

    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id"),
        nullable=False,
        index=True,
        comment="Owning business",
    )
    state: Mapped[MarkerState] = mapped_column(
        SQLEnum(MarkerState),
        nullable=False,
        default=MarkerState.OPEN,
        comment="open, closed, locked or origin",
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First day of the period",
    )
    stop_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Last day of the period (inclusive)",
    )

    __table_args__ = (
        Index("idx_journal_marker_business_state", "business_id", "state"),
        # ids are referenced by audit rows; never reuse a deleted marker's id
        {"sqlite_autoincrement": True},
    )

    @property
    def is_protected(self) -> bool:
        """True when regeneration must leave this marker in place."""
        return self.state != MarkerState.OPEN

    def __repr__(self) -> str:
        return (
            f"<JournalMarker(id={self.id}, business_id={self.business_id}, state={self.state}, "
            f"start_date={self.start_date}, stop_date={self.stop_date})>"
        )


__all__ = ["JournalMarker", "MarkerState"]
