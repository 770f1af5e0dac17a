# affiliate_system/services/ai_pricing_service.py
"""
AI pricing service - turns provider USD costs into diamond prices.

    totalCostUsd    = video + audio + images + research + chat
    totalCostPhp    = totalCostUsd * usd_to_php_rate
    totalWithMarkup = totalCostPhp * (1 + markup / 100)
    totalDiamonds   = ceil(totalWithMarkup / phpPerDiamond)
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_CEILING
from typing import Dict, List, Mapping, Optional
from sqlalchemy.orm import Session
import logging

from models.ai_pricing import AIProviderPricing
from affiliate_system.config.settings import (
    AI_MARKUP_PERCENT,
    DIAMOND_TO_PHP_RATE,
    HUNDRED,
    USD_TO_PHP_RATE,
    get_decimal,
)
from affiliate_system.services.revenue_split_service import ZERO, to_decimal

logger = logging.getLogger(__name__)

# Estimated average cost per research query / chat message (USD)
RESEARCH_QUERY_COST_USD = Decimal("0.0125")
CHAT_MESSAGE_COST_USD = Decimal("0.005")

# Suggested per-unit prices written back to app_settings
DIAMONDS_PER_VIDEO_SECOND = "diamonds_per_video_second"
DIAMONDS_PER_VIDEO_MINUTE = "diamonds_per_video_minute"
DIAMONDS_PER_AUDIO_MINUTE = "diamonds_per_audio_minute"


def ceil_decimal(value: Decimal, places: int = 0) -> Decimal:
    """Round up to the given number of decimal places."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_CEILING)


@dataclass
class UsageQuantities:
    """How much of each AI service to price."""
    video_seconds: Decimal = Decimal("0")
    audio_minutes: Decimal = Decimal("0")
    images: int = 0
    research_queries: int = 0
    chat_messages: int = 0


class AIPricingService:
    """Service for converting AI provider costs to diamond prices."""

    def __init__(self, session: Session):
        self.session = session

    def getProviders(self) -> List[AIProviderPricing]:
        return self.session.query(AIProviderPricing).order_by(
            AIProviderPricing.providerName
        ).all()

    @staticmethod
    def pickProviders(providers: List[AIProviderPricing]) -> Dict[str, Optional[AIProviderPricing]]:
        """First provider that prices each media type (None when nobody does)."""

        def first(attr):
            for provider in providers:
                if to_decimal(getattr(provider, attr)) > 0:
                    return provider
            return None

        return {
            "video": first("videoCostPerSecond"),
            "audio": first("audioCostPerMinute"),
            "image": first("imageCost"),
        }

    def calculate(
            self,
            quantities: UsageQuantities,
            settings: Optional[Mapping[str, str]] = None,
            providers: Optional[List[AIProviderPricing]] = None
    ) -> Dict:
        """
        Price a usage mix in USD, PHP and diamonds.

        A media type without a pricing provider costs 0.
        """
        settings = settings or {}
        if providers is None:
            providers = self.getProviders()
        picked = self.pickProviders(providers)

        usdToPhp = get_decimal(settings, USD_TO_PHP_RATE)
        markup = get_decimal(settings, AI_MARKUP_PERCENT)
        phpPerDiamond = get_decimal(settings, DIAMOND_TO_PHP_RATE)
        if phpPerDiamond <= 0:
            phpPerDiamond = Decimal("1")

        videoRate = to_decimal(picked["video"].videoCostPerSecond) if picked["video"] else ZERO
        audioRate = to_decimal(picked["audio"].audioCostPerMinute) if picked["audio"] else ZERO
        imageRate = to_decimal(picked["image"].imageCost) if picked["image"] else ZERO

        videoCost = to_decimal(quantities.video_seconds) * videoRate
        audioCost = to_decimal(quantities.audio_minutes) * audioRate
        imageCost = Decimal(quantities.images) * imageRate
        researchCost = Decimal(quantities.research_queries) * RESEARCH_QUERY_COST_USD
        chatCost = Decimal(quantities.chat_messages) * CHAT_MESSAGE_COST_USD

        totalCostUsd = videoCost + audioCost + imageCost + researchCost + chatCost
        markupFactor = 1 + markup / HUNDRED

        totalCostPhp = totalCostUsd * usdToPhp
        totalWithMarkup = totalCostPhp * markupFactor
        totalDiamonds = int(ceil_decimal(totalWithMarkup / phpPerDiamond))

        # Per-unit suggested prices
        videoPerSecondPhp = videoRate * usdToPhp * markupFactor
        videoPerMinutePhp = videoPerSecondPhp * 60
        audioMinutes = to_decimal(quantities.audio_minutes)
        if audioMinutes > 0:
            audioPerMinutePhp = audioCost * usdToPhp * markupFactor / audioMinutes
        else:
            audioPerMinutePhp = audioRate * usdToPhp * markupFactor

        return {
            "videoCost": videoCost,
            "audioCost": audioCost,
            "imageCost": imageCost,
            "researchCost": researchCost,
            "chatCost": chatCost,
            "totalCostUsd": totalCostUsd,
            "totalCostPhp": totalCostPhp,
            "totalWithMarkup": totalWithMarkup,
            "totalDiamonds": totalDiamonds,
            "phpPerDiamond": phpPerDiamond,
            "videoCostPerSecondPhp": videoPerSecondPhp,
            "videoCostPerMinutePhp": videoPerMinutePhp,
            "audioCostPerMinutePhp": audioPerMinutePhp,
            # Video seconds may be priced in tenths of a diamond
            "diamondsPerVideoSecond": ceil_decimal(videoPerSecondPhp / phpPerDiamond, 1),
            "diamondsPerVideoMinute": int(ceil_decimal(videoPerMinutePhp / phpPerDiamond)),
            "diamondsPerAudioMinute": int(ceil_decimal(audioPerMinutePhp / phpPerDiamond)),
        }

    def saveRateSettings(self, settingsService, result: Dict, diamondToPhp, markupPercent) -> int:
        """
        Persist the conversion rate, markup and suggested per-unit prices.

        Args:
            settingsService: SettingsService bound to the same session
            result: Output of calculate()
        """
        written = settingsService.saveSettings({
            DIAMOND_TO_PHP_RATE: diamondToPhp,
            AI_MARKUP_PERCENT: markupPercent,
            DIAMONDS_PER_VIDEO_SECOND: result["diamondsPerVideoSecond"],
            DIAMONDS_PER_VIDEO_MINUTE: result["diamondsPerVideoMinute"],
            DIAMONDS_PER_AUDIO_MINUTE: result["diamondsPerAudioMinute"],
        })
        logger.info(f"AI rate settings saved ({written} keys)")
        return written
