# tests/test_settings_service.py
"""
Tests for SettingsService over the app_settings table.

Run:
    pytest tests/test_settings_service.py -v
"""
from decimal import Decimal

from models import AppSetting
from affiliate_system.services.settings_service import SettingsService
from affiliate_system.events.event_bus import eventBus, PayoutEvents


class TestLoadSettings:

    def test_empty_store(self, session):
        assert SettingsService(session).loadSettings() == {}

    def test_loads_flat_map(self, session, add_settings):
        add_settings({"binary_cycle_volume": "2000", "binary_daily_cap": "7000"})

        settings = SettingsService(session).loadSettings()

        assert settings == {"binary_cycle_volume": "2000", "binary_daily_cap": "7000"}

    def test_restrict_to_keys(self, session, add_settings):
        add_settings({"binary_cycle_volume": "2000", "binary_daily_cap": "7000"})

        settings = SettingsService(session).loadSettings(["binary_daily_cap"])

        assert settings == {"binary_daily_cap": "7000"}

    def test_null_values_skipped(self, session):
        session.add(AppSetting(key="binary_daily_cap", value=None))
        session.commit()

        assert SettingsService(session).loadSettings() == {}


class TestTypedConfigs:

    def test_commission_config_by_kind(self, session, add_settings):
        """
        TEST: 'ai_credit_purchase' maps to the credit purchase profile.
        """
        add_settings({"binary_admin_safety_net": "30", "ai_credit_ai_cost_percent": "25"})

        config = SettingsService(session).getCommissionConfig("ai_credit_purchase")

        assert config.admin_profit_percent == Decimal("30")
        assert config.ai_cost_percent == Decimal("25")

    def test_commission_config_by_profile(self, session, add_settings):
        add_settings({"binary_ai_cost_percent": "40"})

        config = SettingsService(session).getCommissionConfig("binary")

        assert config.ai_cost_percent == Decimal("40")
        assert config.admin_profit_percent == Decimal("10")

    def test_subscription_uses_topup_defaults(self, session):
        config = SettingsService(session).getCommissionConfig("subscription")

        assert config.total == Decimal("100")
        assert config.admin_profit_percent == Decimal("35")

    def test_binary_settings_with_bad_value(self, session, add_settings):
        add_settings({"binary_cycle_volume": "not-a-number"})

        settings = SettingsService(session).getBinarySettings()

        assert settings.cycle_volume == Decimal("1000")

    def test_credit_tiers(self, session, add_settings):
        add_settings({"ai_credit_tier_1_daily_cap": "2000"})

        tiers = SettingsService(session).getCreditTiers()

        assert tiers[0].daily_cap == Decimal("2000")


class TestSaveSetting:

    def test_insert_then_update(self, session):
        service = SettingsService(session)

        service.saveSetting("binary_daily_cap", Decimal("6000"))
        session.commit()
        service.saveSetting("binary_daily_cap", "6500")
        session.commit()

        rows = session.query(AppSetting).filter_by(key="binary_daily_cap").all()
        assert len(rows) == 1
        assert rows[0].value == "6500"

    def test_save_many(self, session):
        written = SettingsService(session).saveSettings({"a": 1, "b": "two"})
        session.commit()

        assert written == 2
        assert SettingsService(session).loadSettings() == {"a": "1", "b": "two"}

    def test_save_publishes_settings_changed(self, session):
        """
        TEST: writing a setting publishes settings.changed with its key.
        """
        received = []
        eventBus.subscribe(PayoutEvents.SETTINGS_CHANGED, received.append)

        SettingsService(session).saveSetting("binary_cycle_volume", "1500")
        session.commit()

        assert received == [{"key": "binary_cycle_volume"}]
