"""Receipt ORM models: recorded payments and their split across assessments."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class Receipt(Base, BaseModel):
    """Model representing a payment received under a rental agreement.

    A receipt arrives pre-split into ReceiptAllocation rows; the journal engine
    books those splits verbatim and never re-balances them.
    """

    __tablename__ = "receipts"

    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id"),
        nullable=False,
        index=True,
        comment="Owning business",
    )
    rental_agreement_id: Mapped[int] = mapped_column(
        ForeignKey("rental_agreements.id"),
        nullable=False,
        index=True,
        comment="Agreement the payment is made under",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Total amount received",
    )
    receipt_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Date the payment was received",
    )
    account_rule: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Allocation expression for the whole receipt",
    )

    allocations: Mapped[list["ReceiptAllocation"]] = relationship(
        "ReceiptAllocation",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="ReceiptAllocation.id",
    )

    __table_args__ = (Index("idx_receipt_business_date", "business_id", "receipt_date"),)

    def __repr__(self) -> str:
        return (
            f"<Receipt(id={self.id}, business_id={self.business_id}, amount={self.amount}, "
            f"date={self.receipt_date})>"
        )


class ReceiptAllocation(Base, BaseModel):
    """Portion of a receipt applied to one assessment."""

    __tablename__ = "receipt_allocations"

    receipt_id: Mapped[int] = mapped_column(
        ForeignKey("receipts.id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    assessment_id: Mapped[int | None] = mapped_column(
        ForeignKey("assessments.id"),
        nullable=True,
        comment="Assessment this portion pays",
    )
    account_rule: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
    )

    receipt: Mapped["Receipt"] = relationship("Receipt", back_populates="allocations")

    def __repr__(self) -> str:
        return (
            f"<ReceiptAllocation(id={self.id}, receipt_id={self.receipt_id}, "
            f"assessment_id={self.assessment_id}, amount={self.amount})>"
        )


__all__ = ["Receipt", "ReceiptAllocation"]
