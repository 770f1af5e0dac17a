# tests/test_cycle_estimator.py
"""
Tests for CycleMatchEstimator.

Display estimates only: nothing here consumes volume or credits anyone.

Run:
    pytest tests/test_cycle_estimator.py -v
"""
from decimal import Decimal

import pytest

from affiliate_system.config.settings import default_credit_tiers
from affiliate_system.services.cycle_service import (
    CycleMatchEstimator,
    PRESET_SCENARIOS,
    SimulatorSettings,
    resolve_daily_cap,
    tier_index_for_purchase,
)


@pytest.fixture
def estimator():
    return CycleMatchEstimator()


# =============================================================================
# TEST CLASS: estimate
# =============================================================================

class TestEstimate:
    """Tests for estimate(left, right, cycleVolume)."""

    def test_worked_example(self, estimator):
        """
        TEST: left 2500, right 1800, cycle 1000 → 100% / 100% / 1 cycle.
        """
        result = estimator.estimate(Decimal("2500"), Decimal("1800"), Decimal("1000"))

        assert result["leftPercent"] == Decimal("100")
        assert result["rightPercent"] == Decimal("100")
        assert result["potentialCycles"] == 1

    def test_partial_progress(self, estimator):
        result = estimator.estimate(Decimal("500"), Decimal("250"), Decimal("1000"))

        assert result["leftPercent"] == Decimal("50")
        assert result["rightPercent"] == Decimal("25")
        assert result["potentialCycles"] == 0

    def test_cycles_limited_by_weaker_leg(self, estimator):
        result = estimator.estimate(Decimal("10000"), Decimal("3999"), Decimal("1000"))

        assert result["potentialCycles"] == 3

    @pytest.mark.parametrize("cycleVolume", [Decimal("0"), Decimal("-100")])
    def test_non_positive_cycle_volume_is_neutral(self, estimator, cycleVolume):
        """
        TEST: no division by zero, everything reported as 0.
        """
        result = estimator.estimate(Decimal("2500"), Decimal("1800"), cycleVolume)

        assert result == {
            "leftPercent": Decimal("0"),
            "rightPercent": Decimal("0"),
            "potentialCycles": 0,
        }

    def test_negative_volume_never_gives_negative_cycles(self, estimator):
        result = estimator.estimate(Decimal("-500"), Decimal("2000"), Decimal("1000"))

        assert result["potentialCycles"] == 0

    def test_percent_never_exceeds_100(self, estimator):
        result = estimator.estimate(Decimal("1000000"), Decimal("1000000"), Decimal("1000"))

        assert result["leftPercent"] == Decimal("100")
        assert result["rightPercent"] == Decimal("100")
        assert result["potentialCycles"] == 1000


# =============================================================================
# TEST CLASS: progress helpers
# =============================================================================

class TestProgress:

    def test_daily_cap_half_used(self, estimator):
        assert estimator.dailyCapProgress(Decimal("2500"), Decimal("5000")) == Decimal("50")

    def test_daily_cap_exceeded_shows_100(self, estimator):
        assert estimator.dailyCapProgress(Decimal("6000"), Decimal("5000")) == Decimal("100")

    def test_no_cap_shows_0(self, estimator):
        assert estimator.dailyCapProgress(Decimal("100"), Decimal("0")) == Decimal("0")

    def test_usage_percentage(self, estimator):
        assert estimator.usagePercentage(30, 60) == Decimal("50")

    def test_usage_with_nothing_available(self, estimator):
        assert estimator.usagePercentage(30, 0) == Decimal("0")

    def test_leg_balance(self, estimator):
        bars = estimator.legBalance(Decimal("2000"), Decimal("500"))

        assert bars["leftBar"] == Decimal("100")
        assert bars["rightBar"] == Decimal("25")
        assert bars["weakerLeg"] == Decimal("500")

    def test_leg_balance_empty_legs(self, estimator):
        bars = estimator.legBalance(0, 0)

        assert bars["leftBar"] == Decimal("0")
        assert bars["rightBar"] == Decimal("0")


# =============================================================================
# TEST CLASS: simulate
# =============================================================================

class TestSimulate:
    """Tests for the binary calculator simulation."""

    def test_default_scenario(self, estimator):
        """
        TEST: 4×2990 both legs, cycle 11960, deductions 30/10/5, commission 10%, cap 50000.
        """
        result = estimator.simulate(4, 4, Decimal("2990"))

        assert result["leftLegVolume"] == Decimal("11960")
        assert result["cyclesCompleted"] == 1
        assert result["totalMatchedVolume"] == Decimal("23920")
        assert result["aiCostDeduction"] == Decimal("7176")
        assert result["adminProfitDeduction"] == Decimal("2392")
        assert result["directReferralDeduction"] == Decimal("1196")
        assert result["distributableAmount"] == Decimal("13156")
        assert result["commissionEarned"] == Decimal("1315.6")
        assert result["isCapped"] is False
        assert result["actualCommission"] == Decimal("1315.6")
        assert result["commissionLost"] == Decimal("0")
        assert result["adminEarnings"] == Decimal("2392")
        assert result["totalPurchaseVolume"] == Decimal("23920")

    def test_daily_cap_flushes_excess_to_admin(self, estimator):
        """
        TEST: commission above the cap is flushed and counted as admin earnings.
        """
        settings = SimulatorSettings(daily_cap=Decimal("1000"))

        result = estimator.simulate(4, 4, Decimal("2990"), settings)

        assert result["isCapped"] is True
        assert result["actualCommission"] == Decimal("1000")
        assert result["commissionLost"] == Decimal("315.6")
        assert result["adminEarnings"] == Decimal("2707.6")

    def test_imbalanced_legs_keep_leftover(self, estimator):
        result = estimator.simulate(8, 4, Decimal("2990"))

        assert result["cyclesCompleted"] == 1
        assert result["leftLegRemaining"] == Decimal("11960")
        assert result["rightLegRemaining"] == Decimal("0")

    def test_not_enough_volume_for_a_cycle(self, estimator):
        result = estimator.simulate(1, 1, Decimal("2990"))

        assert result["cyclesCompleted"] == 0
        assert result["commissionEarned"] == Decimal("0")
        assert result["leftLegRemaining"] == Decimal("2990")

    def test_zero_cycle_volume(self, estimator):
        result = estimator.simulate(4, 4, Decimal("2990"), SimulatorSettings(cycle_volume=Decimal("0")))

        assert result["cyclesCompleted"] == 0
        assert result["totalMatchedVolume"] == Decimal("0")

    def test_presets(self, estimator):
        results = estimator.simulatePresets()

        assert len(results) == len(PRESET_SCENARIOS)
        assert results[0]["name"] == PRESET_SCENARIOS[0]["name"]
        assert all(r["cyclesCompleted"] >= 0 for r in results)


# =============================================================================
# TEST CLASS: daily cap resolution
# =============================================================================

class TestDailyCapResolution:

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("10000"), 2),
        (Decimal("9999.99"), 1),
        (Decimal("5000"), 1),
        (Decimal("4999"), 0),
        (Decimal("0"), 0),
    ])
    def test_tier_index_for_purchase(self, amount, expected):
        assert tier_index_for_purchase(amount) == expected

    def test_tier_cap_replaces_global_cap(self):
        assert resolve_daily_cap(1, default_credit_tiers(), Decimal("5000")) == Decimal("3000")

    def test_no_tier_uses_global_cap(self):
        assert resolve_daily_cap(None, default_credit_tiers(), Decimal("5000")) == Decimal("5000")

    def test_unknown_tier_uses_global_cap(self):
        assert resolve_daily_cap(7, default_credit_tiers(), Decimal("5000")) == Decimal("5000")
