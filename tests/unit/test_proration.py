"""Unit tests for proration factor computation."""

from datetime import date
from decimal import Decimal

import pytest

from rentledger.services.errors import ProrationPreconditionError
from rentledger.services.proration import compute_factor

JAN_1 = date(2016, 1, 1)
JAN_31 = date(2016, 1, 31)
FEB_1 = date(2016, 2, 1)


class TestComputeFactor:
    """Tests for compute_factor."""

    def test_partial_month_contract_starts_mid_month(self):
        """Test contract Jan 15 - Dec 31 over range [Jan 1, Feb 1) gives 17/31."""
        result = compute_factor(JAN_1, JAN_31, date(2016, 1, 15), date(2016, 12, 31), JAN_1, FEB_1)

        assert result.effective_days == 17
        assert result.factor == Decimal(17) / Decimal(31)

    def test_full_coverage_not_prorated(self):
        """Test a contract covering the whole range yields factor 1."""
        result = compute_factor(JAN_1, JAN_31, date(2015, 6, 1), date(2016, 6, 1), JAN_1, FEB_1)

        assert result.factor == 1
        assert result.effective_days == 31

    def test_contract_stop_is_inclusive(self):
        """Test a contract ending Jan 31 still covers all of January."""
        result = compute_factor(JAN_1, JAN_31, JAN_1, JAN_31, JAN_1, FEB_1)

        assert result.factor == 1
        assert result.effective_days == 31

    def test_contract_ends_mid_month(self):
        """Test a contract ending Jan 30 covers 30 of 31 days."""
        result = compute_factor(JAN_1, JAN_31, JAN_1, date(2016, 1, 30), JAN_1, FEB_1)

        assert result.effective_days == 30
        assert result.factor == Decimal(30) / Decimal(31)

    def test_proration_disabled(self):
        """Test a disabled policy books the full amount even for a partial contract."""
        result = compute_factor(
            JAN_1, JAN_31, date(2016, 1, 15), date(2016, 12, 31), JAN_1, FEB_1, prorate=False
        )

        assert result.factor == 1
        assert result.effective_days == 31

    def test_no_overlap_gives_zero(self):
        """Test a contract outside the range contributes no days."""
        result = compute_factor(JAN_1, JAN_31, date(2016, 3, 1), date(2016, 12, 31), JAN_1, FEB_1)

        assert result.factor == 0
        assert result.effective_days == 0

    @pytest.mark.parametrize("range_stop", [JAN_1, date(2015, 12, 31)])
    def test_empty_range_rejected(self, range_stop):
        """Test a range spanning no day is a caller error."""
        with pytest.raises(ProrationPreconditionError):
            compute_factor(JAN_1, JAN_31, JAN_1, JAN_31, JAN_1, range_stop)
