"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from rentledger.models.business import Business  # noqa: E402
from rentledger.models.rental_agreement import RentalAgreement  # noqa: E402
from rentledger.models.assessment import Assessment, Frequency  # noqa: E402
from rentledger.models.receipt import Receipt, ReceiptAllocation  # noqa: E402
from rentledger.models.journal import Journal, JournalAllocation, JournalType  # noqa: E402
from rentledger.models.journal_marker import JournalMarker, MarkerState  # noqa: E402
from rentledger.models.audit_log import AuditLog  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "Business",
    "RentalAgreement",
    "Assessment",
    "Frequency",
    "Receipt",
    "ReceiptAllocation",
    "Journal",
    "JournalAllocation",
    "JournalType",
    "JournalMarker",
    "MarkerState",
    "AuditLog",
]
