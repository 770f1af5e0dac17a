# affiliate_system/services/accounting_service.py
"""
Accounting service - aggregated money totals for admin dashboards.

Sums are done in SQL (coalesce(sum(x), 0)); the service only derives
ratios and payouts from them. Every ratio goes through percent_of, so an
empty period reports 0% instead of dividing by zero.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from models.revenue_event import RevenueEvent, RevenueKind
from models.binary.daily_earning import BinaryDailyEarning
from models.binary.daily_summary import BinaryDailySummary
from affiliate_system.config.settings import (
    DIAMOND_BASE_PRICE,
    LEADERSHIP_COMMISSION_PERCENT,
    STAIR_STEP_COMMISSION_PERCENT,
    UNILEVEL_COMMISSION_PERCENT,
    get_decimal,
)
from affiliate_system.services.revenue_split_service import (
    ZERO,
    percent_of,
    percent_share,
    to_decimal,
)
from affiliate_system.utils.time_machine import timeMachine

logger = logging.getLogger(__name__)

# Revenue statuses that count as money actually received
COUNTED_STATUSES = ("approved", "completed")

# BinaryDailySummary column -> result key
SUMMARY_COLUMNS = {
    "totalInflow": BinaryDailySummary.totalVolumeGenerated,
    "totalCommissionsPaid": BinaryDailySummary.totalCommissionsPaid,
    "totalAiCost": BinaryDailySummary.totalAiCostDeducted,
    "totalAdminProfit": BinaryDailySummary.totalAdminProfit,
    "totalDirectReferral": BinaryDailySummary.totalDirectReferralPaid,
    "totalFlushed": BinaryDailySummary.totalCommissionLostToCaps,
    "netAdminEarnings": BinaryDailySummary.netAdminEarnings,
}

# Lines reported as a share of inflow
INFLOW_RATIOS = (
    "totalCommissionsPaid",
    "totalAiCost",
    "totalAdminProfit",
    "totalDirectReferral",
    "totalFlushed",
)


class AccountingService:
    """Service for admin accounting totals."""

    def __init__(self, session: Session):
        self.session = session

    # ============================================================
    # REVENUE
    # ============================================================

    def _revenueQuery(self, column, kinds, statuses, since, until):
        query = self.session.query(column)

        if kinds is not None:
            query = query.filter(RevenueEvent.kind.in_([_kind_value(k) for k in kinds]))
        if statuses is not None:
            query = query.filter(RevenueEvent.status.in_(list(statuses)))
        if since is not None:
            query = query.filter(RevenueEvent.createdAt >= since)
        if until is not None:
            query = query.filter(RevenueEvent.createdAt < until)

        return query

    def getRevenueTotal(
            self,
            kinds: Optional[Iterable] = None,
            statuses: Optional[Iterable[str]] = COUNTED_STATUSES,
            since: Optional[datetime] = None,
            until: Optional[datetime] = None
    ) -> Decimal:
        """
        Sum of revenue amounts matching the filters.

        Args:
            kinds: RevenueKind values (all kinds when None)
            statuses: Statuses to count (all when None, approved/completed by default)
            since: Inclusive lower bound on createdAt
            until: Exclusive upper bound on createdAt

        Returns:
            Total as Decimal, 0 when nothing matches
        """
        total = self._revenueQuery(
            func.coalesce(func.sum(RevenueEvent.amount), 0),
            kinds, statuses, since, until
        ).scalar()

        return to_decimal(total)

    def getRevenueBreakdown(
            self,
            statuses: Optional[Iterable[str]] = COUNTED_STATUSES,
            since: Optional[datetime] = None,
            until: Optional[datetime] = None
    ) -> Dict[str, Decimal]:
        """Revenue total per kind; every known kind is present (0 when empty)."""
        breakdown = {kind.value: ZERO for kind in RevenueKind}

        rows = self._revenueQuery(
            RevenueEvent.kind,
            None, statuses, since, until
        ).add_columns(
            func.coalesce(func.sum(RevenueEvent.amount), 0)
        ).group_by(RevenueEvent.kind).all()

        for kind, total in rows:
            breakdown[kind] = to_decimal(total)

        return breakdown

    def getWeeklyDistribution(
            self,
            weekStart: Optional[date] = None,
            referralDiamonds=0,
            settings: Optional[Mapping[str, str]] = None
    ) -> Dict:
        """
        Weekly sales and how referral diamonds are paid out to the networks.

        referralValue = referralDiamonds * diamond_base_price
        each payout   = referralValue * plan percent / 100   (independent)
        adminCommission = totalSales - all payouts

        Args:
            weekStart: Monday of the week (current week when None)
            referralDiamonds: Referral commission diamonds earned in the week
            settings: Flat settings map (defaults when None)
        """
        settings = settings or {}
        weekStart = weekStart or timeMachine.weekStart
        since = datetime.combine(weekStart, datetime.min.time())
        until = since + timedelta(days=7)

        totalSales = self.getRevenueTotal(
            kinds=[RevenueKind.PRODUCT_SALE],
            since=since,
            until=until
        )

        diamondPrice = get_decimal(settings, DIAMOND_BASE_PRICE)
        referralValue = to_decimal(referralDiamonds) * diamondPrice

        unilevelPayout = percent_share(referralValue, get_decimal(settings, UNILEVEL_COMMISSION_PERCENT))
        stairStepPayout = percent_share(referralValue, get_decimal(settings, STAIR_STEP_COMMISSION_PERCENT))
        leadershipPayout = percent_share(referralValue, get_decimal(settings, LEADERSHIP_COMMISSION_PERCENT))
        totalAffiliatePayout = unilevelPayout + stairStepPayout + leadershipPayout

        adminCommission = totalSales - totalAffiliatePayout

        logger.info(
            f"Weekly distribution {weekStart}: sales={totalSales}, "
            f"payouts={totalAffiliatePayout}, admin={adminCommission}"
        )

        return {
            "weekStart": weekStart,
            "weekEnd": weekStart + timedelta(days=6),
            "totalSales": totalSales,
            "referralValue": referralValue,
            "unilevelPayout": unilevelPayout,
            "stairStepPayout": stairStepPayout,
            "leadershipPayout": leadershipPayout,
            "totalAffiliatePayout": totalAffiliatePayout,
            "adminCommission": adminCommission,
            "netAdminIncome": adminCommission,
        }

    # ============================================================
    # BINARY
    # ============================================================

    def getBinarySummary(
            self,
            since: Optional[date] = None,
            until: Optional[date] = None
    ) -> Dict:
        """
        Totals over BinaryDailySummary rows in [since, until].

        Each outflow line also gets '<key>Percent' = share of total inflow.
        """
        columns = [func.coalesce(func.sum(col), 0) for col in SUMMARY_COLUMNS.values()]
        columns.append(func.coalesce(func.sum(BinaryDailySummary.totalCyclesCompleted), 0))
        columns.append(func.coalesce(func.sum(BinaryDailySummary.totalPurchases), 0))
        columns.append(func.count(BinaryDailySummary.summaryID))

        query = self.session.query(*columns)
        if since is not None:
            query = query.filter(BinaryDailySummary.summaryDate >= since)
        if until is not None:
            query = query.filter(BinaryDailySummary.summaryDate <= until)

        row = query.one()
        moneyValues = row[:len(SUMMARY_COLUMNS)]

        summary = {
            key: to_decimal(value)
            for key, value in zip(SUMMARY_COLUMNS.keys(), moneyValues)
        }
        summary["totalCycles"] = int(row[-3] or 0)
        summary["totalPurchases"] = int(row[-2] or 0)
        summary["days"] = int(row[-1] or 0)

        inflow = summary["totalInflow"]
        for key in INFLOW_RATIOS:
            summary[f"{key}Percent"] = percent_of(summary[key], inflow)

        return summary

    def getUserEarnings(self, userID: int, day: Optional[date] = None) -> Dict:
        """Lifetime binary earnings of a user and what they earned on one day."""
        day = day or timeMachine.today

        lifetime, lifetimeCycles = self.session.query(
            func.coalesce(func.sum(BinaryDailyEarning.totalEarned), 0),
            func.coalesce(func.sum(BinaryDailyEarning.cyclesCompleted), 0)
        ).filter(
            BinaryDailyEarning.userID == userID
        ).one()

        todayRow = self.session.query(BinaryDailyEarning).filter_by(
            userID=userID,
            earningDate=day
        ).first()

        return {
            "userId": userID,
            "day": day,
            "lifetimeEarned": to_decimal(lifetime),
            "lifetimeCycles": int(lifetimeCycles or 0),
            "earnedToday": to_decimal(todayRow.totalEarned) if todayRow else ZERO,
            "cyclesToday": (todayRow.cyclesCompleted or 0) if todayRow else 0,
        }

    def getLatestPurchaseAmount(self, userID: int) -> Optional[Decimal]:
        """Amount of the user's latest approved AI credit purchase (None if none)."""
        event = self.session.query(RevenueEvent).filter(
            RevenueEvent.userID == userID,
            RevenueEvent.kind == RevenueKind.AI_CREDIT_PURCHASE.value,
            RevenueEvent.status.in_(COUNTED_STATUSES)
        ).order_by(
            RevenueEvent.createdAt.desc(),
            RevenueEvent.eventID.desc()
        ).first()

        return to_decimal(event.amount) if event else None


def _kind_value(kind) -> str:
    """Accept RevenueKind members or their string values."""
    return kind.value if isinstance(kind, RevenueKind) else str(kind)
