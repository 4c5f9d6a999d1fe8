"""Allocation balancing for journal entries.

Sums allocation instructions into a net balance and repairs the one-cent
imbalances that appear when prorated amounts are rounded to the cent.
"""

import logging
from decimal import Decimal
from typing import NamedTuple, Sequence

from rentledger.services.account_rule import AllocationInstruction, round_to_cent

logger = logging.getLogger(__name__)


class Balance(NamedTuple):
    """Net balance of an allocation list."""

    net: Decimal  # debits - credits; zero when balanced
    total_debits: Decimal


class BalancedAllocations(NamedTuple):
    """Result of the rounding correction."""

    allocations: list[AllocationInstruction]
    total_debits: Decimal  # the amount to book
    net: Decimal


class AllocationBalancer:
    """Double-entry balance checks and the penny correction."""

    def net_balance(self, allocations: Sequence[AllocationInstruction]) -> Balance:
        """Sum allocations into (net, total debits).

        Args:
            allocations: Instructions to sum

        Returns:
            Balance where net = sum(debits) - sum(credits)
        """
        net = Decimal(0)
        debits = Decimal(0)
        for instruction in allocations:
            net += instruction.signed_amount
            if instruction.is_debit:
                debits += instruction.amount
        return Balance(net=net, total_debits=debits)

    def largest_index(self, allocations: Sequence[AllocationInstruction]) -> int:
        """Index of the largest amount; the first occurrence wins ties."""
        k = 0
        for i, instruction in enumerate(allocations):
            if instruction.amount > allocations[k].amount:
                k = i
        return k

    def correct_rounding(self, allocations: Sequence[AllocationInstruction]) -> BalancedAllocations:
        """Round prorated allocations to the cent and force them to balance.

        Algorithm:
        1. Round every amount to the cent independently
        2. Pick the largest rounded line (first occurrence wins ties)
        3. If the rounded set nets to zero, done
        4. Otherwise add net to the largest line; accept if that balances
        5. Otherwise apply -net to the largest line's rounded value instead
        6. Keep whichever attempt nets closer to zero (ties keep attempt 4)

        The input is not modified.

        Args:
            allocations: Prorated, unrounded instructions

        Returns:
            BalancedAllocations with the kept lines and their debit total
        """
        rounded = [instruction.with_amount(round_to_cent(instruction.amount)) for instruction in allocations]
        if not rounded:
            return BalancedAllocations(allocations=[], total_debits=Decimal("0.00"), net=Decimal("0.00"))

        k = self.largest_index(rounded)
        balance = self.net_balance(rounded)
        if balance.net == 0:
            return BalancedAllocations(rounded, balance.total_debits, balance.net)

        net = balance.net
        largest = rounded[k].amount

        added = list(rounded)
        added[k] = rounded[k].with_amount(largest + net)
        x = self.net_balance(added)
        if x.net == 0:
            logger.debug("Applied %s to allocation %d (%s)", net, k, rounded[k].account)
            return BalancedAllocations(added, x.total_debits, x.net)

        subtracted = list(rounded)
        subtracted[k] = rounded[k].with_amount(largest - net)
        y = self.net_balance(subtracted)
        if abs(y.net) < abs(x.net):
            logger.debug("Applied %s to allocation %d (%s)", -net, k, rounded[k].account)
            return BalancedAllocations(subtracted, y.total_debits, y.net)

        logger.warning(
            "Could not balance allocations to zero; residual %s on account %s",
            x.net,
            rounded[k].account,
        )
        return BalancedAllocations(added, x.total_debits, x.net)


__all__ = ["AllocationBalancer", "Balance", "BalancedAllocations"]
