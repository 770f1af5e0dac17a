# affiliate_system/services/cycle_service.py
"""
Binary cycle estimation - progress of each leg towards the next cycle,
how many cycles the weaker leg can match, and daily cap usage.

These are DISPLAY estimates. Actual cycle completion, volume consumption
and commission crediting happen in the external ledger; nothing here
decrements volumes or credits anyone.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
import logging

from affiliate_system.config.settings import CreditTier, HUNDRED
from affiliate_system.services.revenue_split_service import (
    ZERO,
    to_decimal,
    percent_share,
    clamp_non_negative,
)

logger = logging.getLogger(__name__)

# Purchase amount thresholds that decide which credit tier a user owns
TIER_THRESHOLDS = (
    (Decimal("10000"), 2),  # Tier 3
    (Decimal("5000"), 1),   # Tier 2
)


def capped_percent(value, denominator, cap=HUNDRED) -> Decimal:
    """
    min(value / denominator * 100, cap), with 0 for a non-positive denominator.
    """
    denominator = to_decimal(denominator)
    if denominator <= 0:
        return ZERO
    return min(to_decimal(value) / denominator * HUNDRED, to_decimal(cap))


@dataclass
class SimulatorSettings:
    """Inputs of the admin binary calculator besides the leg sizes."""
    cycle_volume: Decimal = Decimal("11960")
    ai_cost_percent: Decimal = Decimal("30")
    admin_profit_percent: Decimal = Decimal("10")
    direct_referral_percent: Decimal = Decimal("5")
    cycle_commission_percent: Decimal = Decimal("10")
    daily_cap: Decimal = Decimal("50000")


PRESET_SCENARIOS: List[Dict] = [
    {"name": "4x2990 both legs", "left": 4, "right": 4, "price": Decimal("2990")},
    {"name": "2x5990 both legs", "left": 2, "right": 2, "price": Decimal("5990")},
    {"name": "1x11960 both legs", "left": 1, "right": 1, "price": Decimal("11960")},
    {"name": "Mixed: 4x2990 L + 2x5990 R", "left": 4, "right": 2, "price": Decimal("2990")},
    {"name": "Imbalanced: 8x2990 L + 4x2990 R", "left": 8, "right": 4, "price": Decimal("2990")},
]


class CycleMatchEstimator:
    """Stateless binary cycle estimator."""

    def estimate(self, leftVolume, rightVolume, cycleVolume) -> Dict:
        """
        Estimate cycle progress for one binary position.

        leftPercent    = min(left / cycle * 100, 100)   (same for right)
        potentialCycles = floor(min(left, right) / cycle)

        A cycleVolume of 0 (or less) returns the neutral result
        {0, 0, 0} instead of dividing by zero.

        Example:
            estimate(2500, 1800, 1000)
            -> leftPercent=100, rightPercent=100, potentialCycles=1
        """
        left = to_decimal(leftVolume)
        right = to_decimal(rightVolume)
        cycle = to_decimal(cycleVolume)

        if cycle <= 0:
            logger.debug(f"Cycle volume {cycle} is not positive, neutral estimate")
            return {
                "leftPercent": ZERO,
                "rightPercent": ZERO,
                "potentialCycles": 0,
            }

        weakerLeg = min(left, right)
        potentialCycles = max(0, int(weakerLeg // cycle)) if weakerLeg > 0 else 0

        return {
            "leftPercent": min(left / cycle * HUNDRED, HUNDRED),
            "rightPercent": min(right / cycle * HUNDRED, HUNDRED),
            "potentialCycles": potentialCycles,
        }

    def dailyCapProgress(self, earnedToday, cap) -> Decimal:
        """min(earnedToday / cap * 100, 100); 0 when there is no cap."""
        return capped_percent(earnedToday, cap)

    def usagePercentage(self, used, available) -> Decimal:
        """Share of an allowance already used, in percent (max 100)."""
        return capped_percent(used, available)

    def legBalance(self, leftVolume, rightVolume) -> Dict[str, Decimal]:
        """
        Each leg relative to the stronger one, for side-by-side bars.

        Empty legs count as 1 in the denominator, so two empty legs show 0/0.
        """
        left = to_decimal(leftVolume)
        right = to_decimal(rightVolume)
        stronger = max(left if left > 0 else Decimal("1"), right if right > 0 else Decimal("1"))

        return {
            "leftBar": min(HUNDRED, left / stronger * HUNDRED),
            "rightBar": min(HUNDRED, right / stronger * HUNDRED),
            "weakerLeg": min(left, right),
        }

    def simulate(
            self,
            leftUsers: int,
            rightUsers: int,
            tierPrice,
            settings: Optional[SimulatorSettings] = None
    ) -> Dict:
        """
        Simulate one matching run of the binary plan.

        Leg volumes are users x tier price. Deductions are independent
        percentages of the matched volume (both legs); the cycle commission
        is a percentage of what is left, capped by the daily cap. Anything
        above the cap is flushed to the admin.
        """
        settings = settings or SimulatorSettings()
        price = to_decimal(tierPrice)
        cycleVolume = to_decimal(settings.cycle_volume)

        leftLegVolume = Decimal(leftUsers) * price
        rightLegVolume = Decimal(rightUsers) * price
        weakerLeg = min(leftLegVolume, rightLegVolume)

        if cycleVolume > 0 and weakerLeg > 0:
            cyclesCompleted = int(weakerLeg // cycleVolume)
        else:
            cyclesCompleted = 0

        volumeUsedPerLeg = Decimal(cyclesCompleted) * cycleVolume
        totalMatchedVolume = volumeUsedPerLeg * 2

        aiCostDeduction = percent_share(totalMatchedVolume, settings.ai_cost_percent)
        adminProfitDeduction = percent_share(totalMatchedVolume, settings.admin_profit_percent)
        directReferralDeduction = percent_share(totalMatchedVolume, settings.direct_referral_percent)
        totalDeductions = aiCostDeduction + adminProfitDeduction + directReferralDeduction

        distributableAmount = clamp_non_negative(totalMatchedVolume - totalDeductions)
        commissionEarned = percent_share(distributableAmount, settings.cycle_commission_percent)

        dailyCap = to_decimal(settings.daily_cap)
        isCapped = commissionEarned > dailyCap
        actualCommission = min(commissionEarned, dailyCap)
        commissionLost = commissionEarned - actualCommission

        result = {
            "leftLegVolume": leftLegVolume,
            "rightLegVolume": rightLegVolume,
            "weakerLeg": weakerLeg,
            "cyclesCompleted": cyclesCompleted,
            "volumeUsedPerLeg": volumeUsedPerLeg,
            "totalMatchedVolume": totalMatchedVolume,
            "leftLegRemaining": leftLegVolume - volumeUsedPerLeg,
            "rightLegRemaining": rightLegVolume - volumeUsedPerLeg,
            "aiCostDeduction": aiCostDeduction,
            "adminProfitDeduction": adminProfitDeduction,
            "directReferralDeduction": directReferralDeduction,
            "totalDeductions": totalDeductions,
            "distributableAmount": distributableAmount,
            "commissionEarned": commissionEarned,
            "isCapped": isCapped,
            "actualCommission": actualCommission,
            "commissionLost": commissionLost,
            "totalPurchaseVolume": leftLegVolume + rightLegVolume,
            "adminEarnings": adminProfitDeduction + commissionLost,
        }

        if isCapped:
            logger.info(
                f"Simulated commission {commissionEarned} capped at {dailyCap}, "
                f"flushed {commissionLost}"
            )

        return result

    def simulatePresets(self, settings: Optional[SimulatorSettings] = None) -> List[Dict]:
        """Run simulate() for every preset scenario."""
        return [
            {
                "name": preset["name"],
                **self.simulate(preset["left"], preset["right"], preset["price"], settings)
            }
            for preset in PRESET_SCENARIOS
        ]


def tier_index_for_purchase(amount) -> int:
    """
    0-based credit tier owned after an approved purchase of this amount.

    >= 10000 -> tier 3, >= 5000 -> tier 2, otherwise tier 1.
    """
    amount = to_decimal(amount)
    for threshold, tierIndex in TIER_THRESHOLDS:
        if amount >= threshold:
            return tierIndex
    return 0


def resolve_daily_cap(
        tierIndex: Optional[int],
        tiers: Sequence[CreditTier],
        globalCap
) -> Decimal:
    """Tier-specific cap when the user owns a known tier, else the global cap."""
    if tierIndex is not None and 0 <= tierIndex < len(tiers):
        return to_decimal(tiers[tierIndex].daily_cap)
    return to_decimal(globalCap)
