"""Audit trail for journal regeneration and period marker changes."""

from sqlalchemy.orm import Session

from rentledger.models.audit_log import AuditLog


class AuditService:
    """Records who regenerated, closed or locked which journal period.

    Entries join the caller's transaction, so a rolled-back regeneration
    leaves no audit row behind.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        actor: str | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Add an audit row for a journal marker event.

        Args:
            db: Session of the operation being audited (not committed here)
            entity_type: "journal_marker"
            entity_id: Id of the marker created or transitioned
            action: "regenerate", "origin", "close" or "lock"
            actor: Operator name from the CLI --actor option (optional)
            changes: Regeneration counts, or {"from": state, "to": state} for transitions

        Returns:
            The pending AuditLog row
        """
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor,
            changes=changes,
        )
        db.add(entry)
        return entry


__all__ = ["AuditService"]
