"""Assessment ORM model: a recurring or one-time charge against a rentable."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class Frequency(str, Enum):
    """Recurrence cycle of an assessment, also used as its proration granularity.

    As a proration policy, ONE_TIME means the charge is never prorated.
    """

    ONE_TIME = "one_time"
    SECONDLY = "secondly"
    MINUTELY = "minutely"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def granularity(self) -> int:
        """Rank from finest (0, one-time) to coarsest (8, yearly)."""
        return _GRANULARITY[self]

    @property
    def is_sub_daily(self) -> bool:
        return self in (Frequency.SECONDLY, Frequency.MINUTELY, Frequency.HOURLY)


_GRANULARITY = {frequency: rank for rank, frequency in enumerate(Frequency)}


class Assessment(Base, BaseModel):
    """Model representing a charge owed under a rental agreement.

    The account_rule describes how the amount is booked, e.g.
    "d 11001 1000.00, c 40001 1000.00". Its amounts are nominal (unprorated);
    the journal engine scales them to the active part of each billing range.
    """

    __tablename__ = "assessments"

    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id"),
        nullable=False,
        index=True,
        comment="Owning business",
    )
    rentable_id: Mapped[int | None] = mapped_column(
        nullable=True,
        comment="Rentable the charge applies to",
    )
    rental_agreement_id: Mapped[int] = mapped_column(
        ForeignKey("rental_agreements.id"),
        nullable=False,
        index=True,
        comment="Agreement whose active window bounds proration",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Nominal charge per recurrence",
    )
    start: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First date the assessment applies",
    )
    stop: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Last date the assessment applies (may equal start)",
    )
    recurrence: Mapped[Frequency] = mapped_column(
        SQLEnum(Frequency),
        nullable=False,
        default=Frequency.ONE_TIME,
        comment="How often the charge recurs",
    )
    proration: Mapped[Frequency] = mapped_column(
        SQLEnum(Frequency),
        nullable=False,
        default=Frequency.ONE_TIME,
        comment="Proration granularity; ONE_TIME disables proration",
    )
    account_rule: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Allocation expression, e.g. 'd 11001 1000.00, c 40001 1000.00'",
    )
    comment: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    rental_agreement: Mapped["RentalAgreement"] = relationship(  # noqa: F821
        "RentalAgreement",
        foreign_keys=[rental_agreement_id],
    )

    __table_args__ = (Index("idx_assessment_business_dates", "business_id", "start", "stop"),)

    def occurrences_in_range(self, range_start: date, range_stop: date) -> list[date]:
        """Dates in [range_start, range_stop) on which this assessment is due.

        Raises:
            UnsupportedRecurrenceError: For secondly, minutely and hourly recurrences
        """
        from rentledger.services.recurrence import occurrences_in_range

        return occurrences_in_range(self.start, self.stop, self.recurrence, range_start, range_stop)

    def __repr__(self) -> str:
        return (
            f"<Assessment(id={self.id}, business_id={self.business_id}, amount={self.amount}, "
            f"recurrence={self.recurrence}, start={self.start}, stop={self.stop})>"
        )


__all__ = ["Assessment", "Frequency"]
