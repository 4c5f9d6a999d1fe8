"""Proration of recurring charges to a rental agreement's active window."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import NamedTuple

from rentledger.services.errors import ProrationPreconditionError

logger = logging.getLogger(__name__)


class Proration(NamedTuple):
    """Share of a billing range during which the agreement was active."""

    factor: Decimal  # effective_days / range days, or 1 when not prorated
    effective_days: int


def compute_factor(
    assessment_start: date,
    assessment_stop: date,
    contract_start: date,
    contract_stop: date,
    range_start: date,
    range_stop: date,
    prorate: bool = True,
) -> Proration:
    """Compute the proration factor for one billing range.

    The effective window is [range_start, range_stop) intersected with
    [contract_start, contract_stop + 1 day); the contract's last day counts.
    The factor compares that window to the whole range, not to the
    assessment's own start/stop.

    Args:
        assessment_start: Nominal start of the assessment
        assessment_stop: Nominal stop of the assessment
        contract_start: First day of the rental agreement
        contract_stop: Last day of the rental agreement (inclusive)
        range_start: Start of the billing range (inclusive)
        range_stop: End of the billing range (exclusive)
        prorate: Whether the assessment's proration policy is enabled

    Returns:
        Proration(factor, effective_days)

    Raises:
        ProrationPreconditionError: If the range does not span at least one day

    Example:
        Agreement Jan 15 - Dec 31, range [Jan 1, Feb 1): 17 of 31 days.
    """
    assessment_duration = (range_stop - range_start).days
    if assessment_duration <= 0:
        raise ProrationPreconditionError(
            f"Billing range {range_start} to {range_stop} must span at least one day"
        )

    start = max(range_start, contract_start)
    stop = min(range_stop, contract_stop + timedelta(days=1))
    rent_duration = max((stop - start).days, 0)

    if rent_duration != assessment_duration and prorate:
        factor = Decimal(rent_duration) / Decimal(assessment_duration)
        logger.debug(
            "Prorating assessment %s-%s: %d of %d days",
            assessment_start,
            assessment_stop,
            rent_duration,
            assessment_duration,
        )
        return Proration(factor=factor, effective_days=rent_duration)

    return Proration(factor=Decimal(1), effective_days=assessment_duration)


__all__ = ["Proration", "compute_factor"]
