"""Custom exception classes for journal generation.

Provides domain-specific exceptions for clear error handling and reporting.
"""


class JournalError(Exception):
    """Base exception for journal engine errors."""

    pass


class MalformedRuleError(JournalError):
    """An account rule token could not be parsed.

    Not retried: the rule on the source record has to be fixed.
    """

    def __init__(self, rule: str, token: str, position: int, reason: str):
        self.rule = rule
        self.token = token
        self.position = position
        self.reason = reason
        super().__init__(f"Malformed account rule token {position} '{token}' in '{rule}': {reason}")


class ProrationPreconditionError(JournalError):
    """Billing range spans no whole day, so no proration factor exists."""

    pass


class PersistenceError(JournalError):
    """Database operation failed (connection, constraint violation, missing row, etc.)."""

    pass


class UnsupportedRecurrenceError(JournalError):
    """Assessment recurs more often than daily, which journaling cannot expand."""

    pass


class MarkerStateError(JournalError):
    """Requested journal marker transition is not allowed."""

    pass


class AssessmentValidationError(JournalError):
    """Assessment rejected at creation time."""

    pass


class RecordNotFoundError(PersistenceError):
    """A referenced row (rental agreement, marker, business) does not exist."""

    pass
