"""Audit log model for tracking journal period lifecycle events."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for tracking changes to journal markers.

    Records who (actor) did what (action) to which entity (entity_type,
    entity_id) and an optional snapshot of the outcome (changes).
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(String(50), index=False)
    """Entity type being audited: "journal_marker"."""

    entity_id: Mapped[int] = mapped_column(index=False)
    """Primary key of the entity being audited."""

    action: Mapped[str] = mapped_column(String(50), index=False)
    """Action performed: "regenerate", "close", "lock", "origin"."""

    actor: Mapped[str | None] = mapped_column(String(100), nullable=True, index=False)
    """Operator who performed the action. None for system actions."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, index=False)
    """Optional JSON snapshot: {"journals_created": 12, "state": "closed"}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor={self.actor}, created_at={self.created_at})>"
        )


__all__ = ["AuditLog"]
