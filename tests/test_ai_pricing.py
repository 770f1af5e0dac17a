# tests/test_ai_pricing.py
"""
Tests for AIPricingService: USD cost → PHP → markup → diamonds.

Run:
    pytest tests/test_ai_pricing.py -v
"""
from decimal import Decimal

import pytest

from models import AIProviderPricing
from affiliate_system.services.ai_pricing_service import AIPricingService, UsageQuantities
from affiliate_system.services.settings_service import SettingsService


@pytest.fixture
def providers():
    """One provider per media type."""
    return [
        AIProviderPricing(providerName="video-co", videoCostPerSecond=Decimal("0.05")),
        AIProviderPricing(providerName="voice-co", audioCostPerMinute=Decimal("0.02")),
        AIProviderPricing(providerName="image-co", imageCost=Decimal("0.04")),
    ]


@pytest.fixture
def pricing(session):
    return AIPricingService(session)


class TestCalculate:

    def test_mixed_usage_default_rates(self, pricing, providers):
        """
        TEST: 10 s video + 5 images + 4 research + 10 chat = $0.80
              → ₱44.80 → +50% = ₱67.20 → 68 diamonds.
        """
        quantities = UsageQuantities(
            video_seconds=Decimal("10"),
            images=5,
            research_queries=4,
            chat_messages=10,
        )

        result = pricing.calculate(quantities, providers=providers)

        assert result["videoCost"] == Decimal("0.5")
        assert result["imageCost"] == Decimal("0.2")
        assert result["researchCost"] == Decimal("0.05")
        assert result["chatCost"] == Decimal("0.05")
        assert result["totalCostUsd"] == Decimal("0.8")
        assert result["totalCostPhp"] == Decimal("44.8")
        assert result["totalWithMarkup"] == Decimal("67.2")
        assert result["totalDiamonds"] == 68

    def test_diamond_rate_from_settings(self, pricing, providers):
        quantities = UsageQuantities(video_seconds=Decimal("10"), images=5, research_queries=4, chat_messages=10)

        result = pricing.calculate(quantities, settings={"diamond_to_php_rate": "2"}, providers=providers)

        assert result["totalDiamonds"] == 34

    @pytest.mark.parametrize("rate", ["0", "-5", "abc"])
    def test_non_positive_diamond_rate_treated_as_one(self, pricing, providers, rate):
        quantities = UsageQuantities(chat_messages=100)

        result = pricing.calculate(quantities, settings={"diamond_to_php_rate": rate}, providers=providers)

        assert result["phpPerDiamond"] == Decimal("1")
        assert result["totalDiamonds"] == 42

    def test_missing_provider_costs_nothing(self, pricing):
        quantities = UsageQuantities(video_seconds=Decimal("60"), audio_minutes=Decimal("3"), images=10)

        result = pricing.calculate(quantities, providers=[])

        assert result["totalCostUsd"] == Decimal("0")
        assert result["totalDiamonds"] == 0

    def test_per_unit_suggestions(self, pricing, providers):
        """
        TEST: $0.05/s video at 56 PHP/USD with 50% markup = ₱4.20/s, ₱252/min.
        """
        result = pricing.calculate(UsageQuantities(audio_minutes=Decimal("2")), providers=providers)

        assert result["videoCostPerSecondPhp"] == Decimal("4.2")
        assert result["diamondsPerVideoSecond"] == Decimal("4.2")
        assert result["diamondsPerVideoMinute"] == 252
        assert result["audioCostPerMinutePhp"] == Decimal("1.68")
        assert result["diamondsPerAudioMinute"] == 2

    def test_reads_providers_from_store(self, session, pricing):
        session.add(AIProviderPricing(providerName="image-co", imageCost=Decimal("0.04")))
        session.commit()

        result = pricing.calculate(UsageQuantities(images=10))

        assert result["imageCost"] == Decimal("0.4")


class TestSaveRateSettings:

    def test_persists_rates_and_suggestions(self, session, pricing, providers):
        result = pricing.calculate(UsageQuantities(), providers=providers)
        settingsService = SettingsService(session)

        written = pricing.saveRateSettings(settingsService, result, "1", "50")
        session.commit()

        stored = settingsService.loadSettings()
        assert written == 5
        assert stored["diamond_to_php_rate"] == "1"
        assert stored["ai_markup_percent"] == "50"
        assert stored["diamonds_per_video_minute"] == "252"
