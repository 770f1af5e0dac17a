# affiliate_system/services/settings_service.py
"""
Settings service - reads the flat app_settings table and builds typed configs.
"""
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
import logging

from models.app_setting import AppSetting
from affiliate_system.config.settings import (
    BinarySettings,
    CommissionConfig,
    CreditTier,
    KIND_PROFILES,
    COMMISSION_PROFILES,
    load_binary_settings,
    load_commission_config,
    load_credit_tiers,
)

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for reading and writing payout settings."""

    def __init__(self, session: Session):
        self.session = session

    def loadSettings(self, keys: Optional[Iterable[str]] = None) -> Dict[str, str]:
        """
        Load settings as a flat key -> value map.

        Args:
            keys: Restrict to these keys (all settings when None)

        Returns:
            Dict of raw string values; rows with NULL value are skipped
        """
        query = self.session.query(AppSetting)
        if keys is not None:
            query = query.filter(AppSetting.key.in_(list(keys)))

        settings = {
            row.key: row.value
            for row in query.all()
            if row.value is not None
        }

        logger.debug(f"Loaded {len(settings)} settings")
        return settings

    def getCommissionConfig(self, kindOrProfile: str = "topup") -> CommissionConfig:
        """
        Commission config for a revenue kind ('subscription', 'ai_credit_purchase', ...)
        or a profile name ('topup', 'binary', ...).
        """
        profile = KIND_PROFILES.get(kindOrProfile, kindOrProfile)
        keys = COMMISSION_PROFILES.get(profile, {}).values()
        return load_commission_config(self.loadSettings(keys), profile)

    def getBinarySettings(self) -> BinarySettings:
        return load_binary_settings(self.loadSettings())

    def getCreditTiers(self) -> List[CreditTier]:
        return load_credit_tiers(self.loadSettings())

    def saveSetting(self, key: str, value) -> AppSetting:
        """
        Insert or update one setting.

        Values are stored as strings, the way the store keeps them.
        Caller owns the transaction (flush only).
        """
        setting = self.session.query(AppSetting).filter_by(key=key).first()
        if setting is None:
            setting = AppSetting(key=key, value=str(value))
            self.session.add(setting)
            logger.info(f"Setting created: {key} = {value}")
        else:
            setting.value = str(value)
            logger.info(f"Setting updated: {key} = {value}")

        self.session.flush()
        return setting

    def saveSettings(self, values: Dict[str, object]) -> int:
        """Upsert several settings at once, returns how many were written."""
        for key, value in values.items():
            self.saveSetting(key, value)
        return len(values)
