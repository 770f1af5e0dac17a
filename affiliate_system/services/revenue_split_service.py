# affiliate_system/services/revenue_split_service.py
"""
Revenue split calculation - how one payment is shared between admin,
AI/service cost and the affiliate commission plans.

All shares are parallel fractions of the same base amount (never a
cascading waterfall). Nothing here raises on bad configuration:
zero denominators give 0 and negative intermediates clamp to 0.
"""
from decimal import Decimal
from typing import Dict, Mapping, Optional
import logging

from affiliate_system.config.settings import (
    CommissionConfig,
    CreditTier,
    HUNDRED,
    check_percent_total,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Coerce store values (Decimal, int, str, float, None) to Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percent_share(amount, percent) -> Decimal:
    """amount * percent / 100."""
    return to_decimal(amount) * (to_decimal(percent) / HUNDRED)


def percent_of(part, total) -> Decimal:
    """
    What percentage part is of total.

    Returns 0 for a zero total instead of dividing by zero.
    """
    total = to_decimal(total)
    if total == 0:
        return ZERO
    return to_decimal(part) / total * HUNDRED


def clamp_non_negative(value) -> Decimal:
    """max(0, value)."""
    value = to_decimal(value)
    return value if value > 0 else ZERO


class RevenueSplitCalculator:
    """Stateless calculator for payment splits."""

    def split(self, amount, config: CommissionConfig) -> Dict[str, Decimal]:
        """
        Split a payment into independent percentage shares.

        Each share = amount * (percent / 100). remainder is whatever the
        configured percentages leave of the amount, floored at 0.

        Example:
            amount=1000, admin 35, aiCost 20, unilevel 25, stairstep 15,
            leadership 5 -> 350 / 200 / 250 / 150 / 50, remainder 0
        """
        amount = to_decimal(amount)
        check_percent_total(config)

        result = {
            "adminProfit": percent_share(amount, config.admin_profit_percent),
            "aiCost": percent_share(amount, config.ai_cost_percent),
            "unilevel": percent_share(amount, config.unilevel_percent),
            "stairstep": percent_share(amount, config.stairstep_percent),
            "leadership": percent_share(amount, config.leadership_percent),
            "directReferral": percent_share(amount, config.direct_referral_percent),
        }

        total = sum(result.values(), ZERO)
        result["total"] = total
        result["remainder"] = clamp_non_negative(amount - total)

        logger.debug(f"Split {amount}: {result}")

        return result

    def splitAICredit(
            self,
            amount,
            config: CommissionConfig,
            cost=None
    ) -> Dict[str, Decimal]:
        """
        AI-credit purchase split.

        The admin's configured share first absorbs the AI cost; whatever is
        left after cost and admin profit becomes the affiliate pool.

            aiCost          = cost, or amount * aiCostPercent / 100
            adminKeepsTotal = amount * adminProfitPercent / 100
            adminProfit     = max(0, adminKeepsTotal - aiCost)
            affiliatePool   = max(0, amount - aiCost - adminProfit)

        Example:
            amount=1000, adminProfit 35, aiCost 20
            -> aiCost=200, adminKeepsTotal=350, adminProfit=150, affiliatePool=650

        The pool is then distributed over the unilevel/stairstep/leadership
        weights of the config.
        """
        amount = to_decimal(amount)

        if cost is None:
            aiCost = percent_share(amount, config.ai_cost_percent)
        else:
            aiCost = to_decimal(cost)

        adminKeepsTotal = percent_share(amount, config.admin_profit_percent)
        adminProfit = clamp_non_negative(adminKeepsTotal - aiCost)
        affiliatePool = clamp_non_negative(amount - aiCost - adminProfit)

        result = {
            "amount": amount,
            "aiCost": aiCost,
            "adminKeepsTotal": adminKeepsTotal,
            "adminProfit": adminProfit,
            "affiliatePool": affiliatePool,
            "remainder": affiliatePool,
        }
        result.update(self.distributePool(affiliatePool, config.pool_weights))

        logger.debug(
            f"AI credit split {amount}: cost={aiCost}, admin={adminProfit}, "
            f"pool={affiliatePool}"
        )

        return result

    def distributePool(
            self,
            pool,
            weights: Mapping[str, Decimal]
    ) -> Dict[str, Decimal]:
        """
        Distribute a pool proportionally to weights.

        share = pool * weight / sum(weights). A zero weight sum gives
        every name a zero share.
        """
        pool = to_decimal(pool)
        totalWeight = sum((to_decimal(w) for w in weights.values()), ZERO)

        if totalWeight == 0:
            logger.debug("Pool weights sum to 0, nothing distributed")
            return {name: ZERO for name in weights}

        return {
            name: pool * (to_decimal(weight) / totalWeight)
            for name, weight in weights.items()
        }

    def calculateTierUpgrade(
            self,
            currentTier: CreditTier,
            targetTier: CreditTier,
            adminSafetyNet,
            upgradeWeights: Mapping[str, Decimal]
    ) -> Optional[Dict]:
        """
        Split the price difference of a credit tier upgrade.

        Returns None when the target tier is not more expensive than the
        current one.
        """
        upgradeAmount = to_decimal(targetTier.price) - to_decimal(currentTier.price)
        if upgradeAmount <= 0:
            return None

        aiCostDiff = to_decimal(targetTier.cost) - to_decimal(currentTier.cost)
        adminKeeps = percent_share(upgradeAmount, adminSafetyNet)
        netForCommissions = clamp_non_negative(upgradeAmount - aiCostDiff - adminKeeps)

        shares = self.distributePool(netForCommissions, upgradeWeights)

        return {
            "upgradeAmount": upgradeAmount,
            "aiCostDiff": aiCostDiff,
            "adminKeeps": adminKeeps,
            "netForCommissions": netForCommissions,
            "unilevelAmount": shares.get("unilevel", ZERO),
            "stairstepAmount": shares.get("stairstep", ZERO),
            "leadershipAmount": shares.get("leadership", ZERO),
            "additionalCredits": targetTier.credits - currentTier.credits,
            "additionalImages": targetTier.images - currentTier.images,
            "additionalVideos": targetTier.videos - currentTier.videos,
            "newDailyCap": to_decimal(targetTier.daily_cap),
        }

    def safetyNetExample(self, joinAmount, adminSafetyNet, cycleCommission) -> Dict[str, Decimal]:
        """Admin keeps its safety net percentage, the rest forms the affiliate pool."""
        purchaseAmount = to_decimal(joinAmount)
        adminKeeps = percent_share(purchaseAmount, adminSafetyNet)

        return {
            "purchaseAmount": purchaseAmount,
            "adminKeeps": adminKeeps,
            "affiliatePool": clamp_non_negative(purchaseAmount - adminKeeps),
            "cycleEarning": to_decimal(cycleCommission),
        }
