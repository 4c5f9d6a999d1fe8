"""Rental agreement ORM model: the contract whose active window drives proration."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models import Base, BaseModel


class RentalAgreement(Base, BaseModel):
    """Model representing a rental agreement between a business and its payors.

    The agreement is active from rental_start through rental_stop, both days
    inclusive.
    """

    __tablename__ = "rental_agreements"

    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id"),
        nullable=False,
        index=True,
        comment="Owning business",
    )
    rental_start: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First day of the rental",
    )
    rental_stop: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Last day of the rental (inclusive)",
    )

    __table_args__ = (Index("idx_rental_agreement_dates", "rental_start", "rental_stop"),)

    def __repr__(self) -> str:
        return (
            f"<RentalAgreement(id={self.id}, business_id={self.business_id}, "
            f"rental_start={self.rental_start}, rental_stop={self.rental_stop})>"
        )


__all__ = ["RentalAgreement"]
