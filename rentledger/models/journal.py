"""Journal ORM models: derived, regenerable double-entry bookings."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class JournalType(str, Enum):
    """What produced a journal entry."""

    ASSESSMENT = "assessment"
    """source_id is an Assessment id"""

    RECEIPT = "receipt"
    """source_id is a Receipt id"""


class Journal(Base, BaseModel):
    """Model representing one booked assessment occurrence or receipt.

    Journals are owned by the accounting period they fall in and are deleted
    and rebuilt whenever that period is regenerated. The amount is the debit
    total of the allocations actually booked.
    """

    __tablename__ = "journals"

    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id"),
        nullable=False,
        index=True,
        comment="Owning business",
    )
    rental_agreement_id: Mapped[int | None] = mapped_column(
        ForeignKey("rental_agreements.id"),
        nullable=True,
        comment="Agreement of the source assessment or receipt",
    )
    journal_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Occurrence date (assessments) or receipt date (receipts)",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Booked debit total",
    )
    journal_type: Mapped[JournalType] = mapped_column(
        SQLEnum(JournalType),
        nullable=False,
        comment="Source kind: assessment or receipt",
    )
    source_id: Mapped[int] = mapped_column(
        nullable=False,
        comment="Id of the source Assessment or Receipt",
    )

    allocations: Mapped[list["JournalAllocation"]] = relationship(
        "JournalAllocation",
        back_populates="journal",
        order_by="JournalAllocation.id",
    )

    __table_args__ = (
        Index("idx_journal_business_date", "business_id", "journal_date"),
        Index("idx_journal_source", "journal_type", "source_id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return (
            f"<Journal(id={self.id}, business_id={self.business_id}, date={self.journal_date}, "
            f"type={self.journal_type}, source_id={self.source_id}, amount={self.amount})>"
        )


class JournalAllocation(Base, BaseModel):
    """How a journal amount is spread across accounts.

    account_rule holds the canonical (rounded, balanced) rule that was booked,
    which can differ from the nominal rule on the source assessment.
    """

    __tablename__ = "journal_allocations"

    journal_id: Mapped[int] = mapped_column(
        ForeignKey("journals.id"),
        nullable=False,
        index=True,
    )
    assessment_id: Mapped[int | None] = mapped_column(
        nullable=True,
        comment="Assessment that is the source of the charge or payment",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    account_rule: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
        comment="Canonical rule actually booked",
    )

    journal: Mapped["Journal"] = relationship("Journal", back_populates="allocations")

    def __repr__(self) -> str:
        return (
            f"<JournalAllocation(id={self.id}, journal_id={self.journal_id}, "
            f"amount={self.amount}, account_rule={self.account_rule!r})>"
        )


__all__ = ["Journal", "JournalAllocation", "JournalType"]
