"""Business ORM model: the unit that owns agreements, assessments and journals."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models import Base, BaseModel


class Business(Base, BaseModel):
    """A rental business, identified externally by its short designation (e.g. 'REH')."""

    __tablename__ = "businesses"

    designation: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        index=True,
        comment="Short business code used by operators and the CLI",
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
        comment="Display name",
    )

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, designation={self.designation!r})>"


__all__ = ["Business"]
