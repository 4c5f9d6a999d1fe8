"""Account rule parsing and canonical formatting.

An account rule is a compact allocation expression describing how an amount
is booked across accounts:

- Tokens are comma separated: "<action> <account> <amount>"
- Action: "d" (debit) or "c" (credit), case-insensitive
- Amount: decimal literal, never negative (the sign lives in the action)

Example:
    >>> [(i.action.value, i.account, str(i.amount)) for i in parse_account_rule("d 11001 1000.00, c 40001 1000.00")]
    [('d', '11001', '1000.00'), ('c', '40001', '1000.00')]

    >>> format_account_rule(parse_account_rule("D 11001 500, c 40001 499.999"))
    'd 11001 500.00, c 40001 500.00'
"""

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Iterable

from rentledger.services.errors import MalformedRuleError

CENT = Decimal("0.01")


class Action(str, Enum):
    """Side of the ledger an instruction posts to."""

    DEBIT = "d"
    CREDIT = "c"


@dataclass(frozen=True)
class AllocationInstruction:
    """One debit or credit line of an account rule."""

    action: Action
    account: str
    amount: Decimal

    @property
    def is_debit(self) -> bool:
        return self.action == Action.DEBIT

    @property
    def signed_amount(self) -> Decimal:
        """Amount with debits positive and credits negative."""
        return self.amount if self.is_debit else -self.amount

    def with_amount(self, amount: Decimal) -> "AllocationInstruction":
        return replace(self, amount=amount)


def round_to_cent(amount: Decimal) -> Decimal:
    """Round half-up to the minimum currency unit.

    Examples:
        >>> round_to_cent(Decimal("333.335"))
        Decimal('333.34')
        >>> round_to_cent(Decimal("1000"))
        Decimal('1000.00')
    """
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_account_rule(rule: str | None, factor: Decimal = Decimal(1)) -> list[AllocationInstruction]:
    """
    Parse an account rule into ordered allocation instructions.

    Every amount is multiplied by the proration factor as it is parsed;
    callers pass 1 for unprorated rules.

    Args:
        rule: Account rule string (e.g., "d 11001 1000.00, c 40001 1000.00") or None/empty
        factor: Proration factor applied to each amount

    Returns:
        List of AllocationInstruction in rule order (empty for empty input)

    Raises:
        MalformedRuleError: If any token lacks an account or amount, has an
            unknown action, or has an invalid amount

    Examples:
        >>> [i.amount for i in parse_account_rule("d 11001 100, c 40001 100", Decimal("0.5"))]
        [Decimal('50.0'), Decimal('50.0')]
        >>> parse_account_rule("")
        []
    """
    if not rule or not rule.strip():
        return []

    factor = Decimal(str(factor))
    instructions = []

    for position, raw_token in enumerate(rule.split(","), start=1):
        token = raw_token.strip()
        parts = token.split()

        if not parts:
            raise MalformedRuleError(rule, token, position, "empty token")
        if len(parts) < 3:
            raise MalformedRuleError(
                rule, token, position, "expected '<action> <account> <amount>'"
            )
        if len(parts) > 3:
            raise MalformedRuleError(rule, token, position, "unexpected text after amount")

        action_str, account, amount_str = parts

        try:
            action = Action(action_str.lower())
        except ValueError as e:
            raise MalformedRuleError(
                rule, token, position, f"action must be 'd' or 'c', found '{action_str}'"
            ) from e

        try:
            amount = Decimal(amount_str)
        except InvalidOperation as e:
            raise MalformedRuleError(
                rule, token, position, f"cannot parse amount '{amount_str}'"
            ) from e

        if not amount.is_finite() or amount < 0:
            raise MalformedRuleError(
                rule, token, position, f"amount must be a non-negative number, found '{amount_str}'"
            )

        instructions.append(AllocationInstruction(action=action, account=account, amount=amount * factor))

    return instructions


def format_account_rule(instructions: Iterable[AllocationInstruction]) -> str:
    """Render instructions as a canonical rule with amounts rounded to the cent.

    Examples:
        >>> format_account_rule([AllocationInstruction(Action.DEBIT, "11001", Decimal("12.3"))])
        'd 11001 12.30'
    """
    return ", ".join(
        f"{instruction.action.value} {instruction.account} {round_to_cent(instruction.amount):.2f}"
        for instruction in instructions
    )


__all__ = [
    "CENT",
    "Action",
    "AllocationInstruction",
    "round_to_cent",
    "parse_account_rule",
    "format_account_rule",
]
