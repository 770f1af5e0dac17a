# affiliate_system/services/read_model.py
"""
Dashboard read model - cached derived figures for the affiliate and admin views.

Entries are never pushed by writers. Store changes only mark scopes dirty
(event handlers call invalidate); the next read recomputes the entry.
RefreshScheduler additionally calls refresh() on an interval, so figures
changed outside this process are picked up too.
"""
from datetime import datetime, timezone
from typing import Callable, ContextManager, Dict, Optional
from sqlalchemy.orm import Session
import logging

from core.db import get_db_session_ctx
from models.binary.position import BinaryPosition
from affiliate_system.config.settings import (
    COMMISSION_PROFILES,
    load_binary_settings,
    load_commission_config,
    load_credit_tiers,
)
from affiliate_system.services.settings_service import SettingsService
from affiliate_system.services.accounting_service import AccountingService
from affiliate_system.services.cycle_service import (
    CycleMatchEstimator,
    resolve_daily_cap,
    tier_index_for_purchase,
)
from affiliate_system.services.revenue_split_service import ZERO, to_decimal

logger = logging.getLogger(__name__)


class ReadModelScope:
    """Invalidation scopes."""

    SETTINGS = "settings"
    ADMIN = "admin"
    USER = "user"
    ALL = "all"


class DashboardReadModel:
    """
    Process-local cache of settings snapshots and per-user binary snapshots.

    User snapshots depend on settings (cycle volume, caps), so invalidating
    settings also drops every user snapshot.
    """

    def __init__(self, sessionProvider: Optional[Callable[[], ContextManager[Session]]] = None):
        self.sessionProvider = sessionProvider or get_db_session_ctx
        self.estimator = CycleMatchEstimator()

        self._settingsSnapshot: Optional[Dict] = None
        self._userSnapshots: Dict[int, Dict] = {}
        self._binarySummary: Optional[Dict] = None

        self.stats = {
            "settingsRecomputes": 0,
            "userRecomputes": 0,
            "summaryRecomputes": 0,
            "invalidations": 0,
            "refreshes": 0,
            "lastRefreshAt": None,
        }

    # ============================================================
    # INVALIDATION
    # ============================================================

    def invalidate(self, scope: str = ReadModelScope.ALL, userID: Optional[int] = None):
        """
        Mark cached entries stale.

        Args:
            scope: 'settings', 'admin', 'user' or 'all'
            userID: For scope 'user'; None drops every user snapshot
        """
        self.stats["invalidations"] += 1

        if scope == ReadModelScope.USER:
            if userID is None:
                self._userSnapshots.clear()
            else:
                self._userSnapshots.pop(userID, None)
            logger.debug(f"Read model invalidated: user={userID}")
            return

        if scope == ReadModelScope.ADMIN:
            self._binarySummary = None
            logger.debug("Read model invalidated: admin")
            return

        if scope not in (ReadModelScope.SETTINGS, ReadModelScope.ALL):
            logger.warning(f"Unknown read model scope '{scope}', invalidating all")

        self._settingsSnapshot = None
        self._userSnapshots.clear()
        if scope != ReadModelScope.SETTINGS:
            self._binarySummary = None
        logger.debug(f"Read model invalidated: {scope}")

    def isCached(self, userID: Optional[int] = None) -> bool:
        """Whether the settings snapshot (or a user's snapshot) is currently cached."""
        if userID is None:
            return self._settingsSnapshot is not None
        return userID in self._userSnapshots

    def refresh(self) -> Dict:
        """
        Drop everything and recompute the settings snapshot plus whatever
        else was cached before (user snapshots, admin summary).
        """
        cachedUsers = list(self._userSnapshots.keys())
        hadSummary = self._binarySummary is not None
        self.invalidate(ReadModelScope.ALL)

        self.getSettingsSnapshot()
        for userID in cachedUsers:
            self.getUserSnapshot(userID)
        if hadSummary:
            self.getBinarySummary()

        self.stats["refreshes"] += 1
        self.stats["lastRefreshAt"] = datetime.now(timezone.utc)

        logger.info(f"Read model refreshed ({len(cachedUsers)} user snapshots)")
        return {"users": len(cachedUsers)}

    # ============================================================
    # SNAPSHOTS
    # ============================================================

    def getSettingsSnapshot(self) -> Dict:
        """Settings map and every typed config built from it."""
        if self._settingsSnapshot is None:
            with self.sessionProvider() as session:
                settings = SettingsService(session).loadSettings()

            self._settingsSnapshot = {
                "settings": settings,
                "binary": load_binary_settings(settings),
                "creditTiers": load_credit_tiers(settings),
                "commission": {
                    profile: load_commission_config(settings, profile)
                    for profile in COMMISSION_PROFILES
                },
            }
            self.stats["settingsRecomputes"] += 1
            logger.debug(f"Settings snapshot recomputed ({len(settings)} keys)")

        return self._settingsSnapshot

    def getUserSnapshot(self, userID: int) -> Dict:
        """
        Binary figures for one participant.

        Missing position means empty legs; missing earnings mean 0.
        """
        if userID in self._userSnapshots:
            return self._userSnapshots[userID]

        snapshot = self.getSettingsSnapshot()
        binary = snapshot["binary"]

        with self.sessionProvider() as session:
            position = session.query(BinaryPosition).filter_by(userID=userID).first()
            hasPosition = position is not None
            leftVolume = to_decimal(position.leftVolume) if hasPosition else ZERO
            rightVolume = to_decimal(position.rightVolume) if hasPosition else ZERO
            totalCycles = (position.totalCycles or 0) if hasPosition else 0

            accounting = AccountingService(session)
            earnings = accounting.getUserEarnings(userID)
            purchaseAmount = accounting.getLatestPurchaseAmount(userID)

        tierIndex = tier_index_for_purchase(purchaseAmount) if purchaseAmount is not None else None
        dailyCap = resolve_daily_cap(tierIndex, snapshot["creditTiers"], binary.daily_cap)

        userSnapshot = {
            "userId": userID,
            "hasPosition": hasPosition,
            "leftVolume": leftVolume,
            "rightVolume": rightVolume,
            "totalCycles": totalCycles,
            "cycle": self.estimator.estimate(leftVolume, rightVolume, binary.cycle_volume),
            "legBalance": self.estimator.legBalance(leftVolume, rightVolume),
            "tierIndex": tierIndex,
            "dailyCap": dailyCap,
            "earnedToday": earnings["earnedToday"],
            "dailyCapProgress": self.estimator.dailyCapProgress(earnings["earnedToday"], dailyCap),
            "lifetimeEarned": earnings["lifetimeEarned"],
            "lifetimeCycles": earnings["lifetimeCycles"],
        }

        self._userSnapshots[userID] = userSnapshot
        self.stats["userRecomputes"] += 1
        return userSnapshot

    def getBinarySummary(self) -> Dict:
        """All-time binary accounting totals for the admin dashboard."""
        if self._binarySummary is None:
            with self.sessionProvider() as session:
                self._binarySummary = AccountingService(session).getBinarySummary()
            self.stats["summaryRecomputes"] += 1

        return self._binarySummary


# Global read model instance
readModel = DashboardReadModel()
