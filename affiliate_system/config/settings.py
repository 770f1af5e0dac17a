"""
Settings catalog for payout calculations.

The store keeps settings as a flat table of string keys to string values.
Every key the calculators read has a hardcoded default here; a missing or
unparsable value silently falls back to it (logged, never raised).
"""
import re
import logging
from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


# ═══════════════════════════════════════════════════════════════════════════
# KEY CATALOG
# ═══════════════════════════════════════════════════════════════════════════

# Binary plan
BINARY_JOIN_AMOUNT = "binary_join_amount"
BINARY_CYCLE_VOLUME = "binary_cycle_volume"
BINARY_CYCLE_COMMISSION = "binary_cycle_commission"
BINARY_DAILY_CAP = "binary_daily_cap"
BINARY_ADMIN_SAFETY_NET = "binary_admin_safety_net"
BINARY_AUTO_REPLENISH_ENABLED = "binary_auto_replenish_enabled"
BINARY_AUTO_REPLENISH_PERCENT = "binary_auto_replenish_percent"
BINARY_UNILEVEL_DEDUCT_PERCENT = "binary_unilevel_deduct_percent"
BINARY_STAIRSTEP_DEDUCT_PERCENT = "binary_stairstep_deduct_percent"
BINARY_LEADERSHIP_DEDUCT_PERCENT = "binary_leadership_deduct_percent"
BINARY_UPGRADE_UNILEVEL_PERCENT = "binary_upgrade_unilevel_percent"
BINARY_UPGRADE_STAIRSTEP_PERCENT = "binary_upgrade_stairstep_percent"
BINARY_UPGRADE_LEADERSHIP_PERCENT = "binary_upgrade_leadership_percent"
BINARY_AI_COST_PERCENT = "binary_ai_cost_percent"
BINARY_ADMIN_PROFIT_PERCENT = "binary_admin_profit_percent"
BINARY_DIRECT_REFERRAL_PERCENT = "binary_direct_referral_percent"

# AI credit top-ups
AI_TOPUP_ADMIN_PROFIT = "ai_topup_admin_profit"
AI_TOPUP_AI_COST_PERCENT = "ai_topup_ai_cost_percent"
AI_TOPUP_UNILEVEL_PERCENT = "ai_topup_unilevel_percent"
AI_TOPUP_STAIRSTEP_PERCENT = "ai_topup_stairstep_percent"
AI_TOPUP_LEADERSHIP_PERCENT = "ai_topup_leadership_percent"
AI_TOPUP_DIRECT_REFERRAL_PERCENT = "ai_topup_direct_referral_percent"
AI_TOPUP_PRICE_PER_CREDIT = "ai_topup_price_per_credit"
AI_TOPUP_MIN_CREDITS = "ai_topup_min_credits"

# AI credit tier purchases
AI_CREDIT_AI_COST_PERCENT = "ai_credit_ai_cost_percent"

# Product / food sales (weekly accounting)
UNILEVEL_COMMISSION_PERCENT = "unilevel_commission_percent"
STAIR_STEP_COMMISSION_PERCENT = "stair_step_commission_percent"
LEADERSHIP_COMMISSION_PERCENT = "leadership_commission_percent"
DIAMOND_BASE_PRICE = "diamond_base_price"

# AI pricing
DIAMOND_TO_PHP_RATE = "diamond_to_php_rate"
AI_MARKUP_PERCENT = "ai_markup_percent"
USD_TO_PHP_RATE = "usd_to_php_rate"

DEFAULTS: Dict[str, str] = {
    BINARY_JOIN_AMOUNT: "500",
    BINARY_CYCLE_VOLUME: "1000",
    BINARY_CYCLE_COMMISSION: "100",
    BINARY_DAILY_CAP: "5000",
    BINARY_ADMIN_SAFETY_NET: "35",
    BINARY_AUTO_REPLENISH_ENABLED: "true",
    BINARY_AUTO_REPLENISH_PERCENT: "20",
    BINARY_UNILEVEL_DEDUCT_PERCENT: "20",
    BINARY_STAIRSTEP_DEDUCT_PERCENT: "20",
    BINARY_LEADERSHIP_DEDUCT_PERCENT: "20",
    BINARY_UPGRADE_UNILEVEL_PERCENT: "40",
    BINARY_UPGRADE_STAIRSTEP_PERCENT: "35",
    BINARY_UPGRADE_LEADERSHIP_PERCENT: "25",
    BINARY_AI_COST_PERCENT: "30",
    BINARY_ADMIN_PROFIT_PERCENT: "10",
    BINARY_DIRECT_REFERRAL_PERCENT: "5",

    AI_TOPUP_ADMIN_PROFIT: "35",
    AI_TOPUP_AI_COST_PERCENT: "20",
    AI_TOPUP_UNILEVEL_PERCENT: "25",
    AI_TOPUP_STAIRSTEP_PERCENT: "15",
    AI_TOPUP_LEADERSHIP_PERCENT: "5",
    AI_TOPUP_DIRECT_REFERRAL_PERCENT: "0",
    AI_TOPUP_PRICE_PER_CREDIT: "3",
    AI_TOPUP_MIN_CREDITS: "100",

    AI_CREDIT_AI_COST_PERCENT: "20",

    UNILEVEL_COMMISSION_PERCENT: "40",
    STAIR_STEP_COMMISSION_PERCENT: "35",
    LEADERSHIP_COMMISSION_PERCENT: "25",
    DIAMOND_BASE_PRICE: "10",

    DIAMOND_TO_PHP_RATE: "1",
    AI_MARKUP_PERCENT: "50",
    USD_TO_PHP_RATE: "56",
}


# ═══════════════════════════════════════════════════════════════════════════
# TOLERANT PARSING
# ═══════════════════════════════════════════════════════════════════════════

def parse_decimal(raw: Optional[str], default) -> Decimal:
    """
    Parse a stored setting value to Decimal.

    Missing, empty, unparsable or non-finite values return the default.

    Example:
        parse_decimal("35", "0") -> Decimal("35")
        parse_decimal("abc", "35") -> Decimal("35")
    """
    fallback = Decimal(str(default))

    if raw is None:
        return fallback

    text = str(raw).strip()
    if not text:
        return fallback

    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        logger.warning(f"Unparsable numeric setting '{raw}', using default {fallback}")
        return fallback

    if not value.is_finite():
        logger.warning(f"Non-finite numeric setting '{raw}', using default {fallback}")
        return fallback

    return value


def parse_int(raw: Optional[str], default) -> int:
    """Parse to int, truncating any fractional part ("12.7" -> 12)."""
    return int(parse_decimal(raw, default))


def parse_bool(raw: Optional[str], default: bool) -> bool:
    """Only the literal 'true' (any case) is True; missing returns default."""
    if raw is None or str(raw).strip() == "":
        return default
    return str(raw).strip().lower() == "true"


def get_decimal(settings: Mapping[str, str], key: str) -> Decimal:
    """Read a catalog key from a flat settings map as Decimal."""
    return parse_decimal(settings.get(key), DEFAULTS.get(key, "0"))


def get_int(settings: Mapping[str, str], key: str) -> int:
    """Read a catalog key from a flat settings map as int."""
    return parse_int(settings.get(key), DEFAULTS.get(key, "0"))


def get_bool(settings: Mapping[str, str], key: str) -> bool:
    """Read a catalog key from a flat settings map as bool."""
    return parse_bool(settings.get(key), DEFAULTS.get(key, "false") == "true")


# ═══════════════════════════════════════════════════════════════════════════
# COMMISSION CONFIG
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CommissionConfig:
    """
    Named percentages applied to one payment.

    Each percentage is independent. They are expected to sum to 100
    but nothing enforces it (see check_percent_total).
    """
    admin_profit_percent: Decimal = Decimal("0")
    ai_cost_percent: Decimal = Decimal("0")
    unilevel_percent: Decimal = Decimal("0")
    stairstep_percent: Decimal = Decimal("0")
    leadership_percent: Decimal = Decimal("0")
    direct_referral_percent: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return sum((getattr(self, f.name) for f in fields(self)), Decimal("0"))

    @property
    def pool_weights(self) -> Dict[str, Decimal]:
        """Weights for distributing an affiliate pool between the three plans."""
        return {
            "unilevel": self.unilevel_percent,
            "stairstep": self.stairstep_percent,
            "leadership": self.leadership_percent,
        }


# Which catalog key feeds which CommissionConfig field, per revenue profile
COMMISSION_PROFILES: Dict[str, Dict[str, str]] = {
    "topup": {
        "admin_profit_percent": AI_TOPUP_ADMIN_PROFIT,
        "ai_cost_percent": AI_TOPUP_AI_COST_PERCENT,
        "unilevel_percent": AI_TOPUP_UNILEVEL_PERCENT,
        "stairstep_percent": AI_TOPUP_STAIRSTEP_PERCENT,
        "leadership_percent": AI_TOPUP_LEADERSHIP_PERCENT,
        "direct_referral_percent": AI_TOPUP_DIRECT_REFERRAL_PERCENT,
    },
    "credit_purchase": {
        "admin_profit_percent": BINARY_ADMIN_SAFETY_NET,
        "ai_cost_percent": AI_CREDIT_AI_COST_PERCENT,
        "unilevel_percent": BINARY_UPGRADE_UNILEVEL_PERCENT,
        "stairstep_percent": BINARY_UPGRADE_STAIRSTEP_PERCENT,
        "leadership_percent": BINARY_UPGRADE_LEADERSHIP_PERCENT,
    },
    "product_sale": {
        "unilevel_percent": UNILEVEL_COMMISSION_PERCENT,
        "stairstep_percent": STAIR_STEP_COMMISSION_PERCENT,
        "leadership_percent": LEADERSHIP_COMMISSION_PERCENT,
    },
    "binary": {
        "admin_profit_percent": BINARY_ADMIN_PROFIT_PERCENT,
        "ai_cost_percent": BINARY_AI_COST_PERCENT,
        "unilevel_percent": BINARY_UNILEVEL_DEDUCT_PERCENT,
        "stairstep_percent": BINARY_STAIRSTEP_DEDUCT_PERCENT,
        "leadership_percent": BINARY_LEADERSHIP_DEDUCT_PERCENT,
        "direct_referral_percent": BINARY_DIRECT_REFERRAL_PERCENT,
    },
}

# RevenueKind value -> commission profile
KIND_PROFILES: Dict[str, str] = {
    "subscription": "topup",
    "topup": "topup",
    "ai_credit_purchase": "credit_purchase",
    "product_sale": "product_sale",
}


def load_commission_config(settings: Mapping[str, str], profile: str = "topup") -> CommissionConfig:
    """
    Build CommissionConfig for a profile from a flat settings map.

    Unknown profile falls back to 'topup'. Fields the profile does not map stay 0.
    """
    keys = COMMISSION_PROFILES.get(profile)
    if keys is None:
        logger.warning(f"Unknown commission profile '{profile}', using 'topup'")
        keys = COMMISSION_PROFILES["topup"]

    values = {fieldName: get_decimal(settings, key) for fieldName, key in keys.items()}
    return CommissionConfig(**values)


def check_percent_total(config: CommissionConfig, expected: Decimal = HUNDRED) -> Decimal:
    """
    Return the percentage total, warning when it is not the expected 100.

    Never rejects the config: operators may run with a non-100 total.
    """
    total = config.total
    if total != expected:
        logger.warning(
            f"Commission percentages sum to {total}%, expected {expected}% "
            f"(config accepted as-is)"
        )
    return total


# ═══════════════════════════════════════════════════════════════════════════
# BINARY SETTINGS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class BinarySettings:
    """Binary plan settings as shown on the affiliate and admin screens."""
    join_amount: Decimal = Decimal("500")
    cycle_volume: Decimal = Decimal("1000")
    cycle_commission: Decimal = Decimal("100")
    daily_cap: Decimal = Decimal("5000")
    admin_safety_net: Decimal = Decimal("35")
    auto_replenish_enabled: bool = True
    auto_replenish_percent: Decimal = Decimal("20")
    unilevel_deduct_percent: Decimal = Decimal("20")
    stairstep_deduct_percent: Decimal = Decimal("20")
    leadership_deduct_percent: Decimal = Decimal("20")
    upgrade_weights: Dict[str, Decimal] = field(default_factory=lambda: {
        "unilevel": Decimal("40"),
        "stairstep": Decimal("35"),
        "leadership": Decimal("25"),
    })


def load_binary_settings(settings: Mapping[str, str]) -> BinarySettings:
    """Build BinarySettings from a flat settings map."""
    return BinarySettings(
        join_amount=get_decimal(settings, BINARY_JOIN_AMOUNT),
        cycle_volume=get_decimal(settings, BINARY_CYCLE_VOLUME),
        cycle_commission=get_decimal(settings, BINARY_CYCLE_COMMISSION),
        daily_cap=get_decimal(settings, BINARY_DAILY_CAP),
        admin_safety_net=get_decimal(settings, BINARY_ADMIN_SAFETY_NET),
        auto_replenish_enabled=get_bool(settings, BINARY_AUTO_REPLENISH_ENABLED),
        auto_replenish_percent=get_decimal(settings, BINARY_AUTO_REPLENISH_PERCENT),
        unilevel_deduct_percent=get_decimal(settings, BINARY_UNILEVEL_DEDUCT_PERCENT),
        stairstep_deduct_percent=get_decimal(settings, BINARY_STAIRSTEP_DEDUCT_PERCENT),
        leadership_deduct_percent=get_decimal(settings, BINARY_LEADERSHIP_DEDUCT_PERCENT),
        upgrade_weights={
            "unilevel": get_decimal(settings, BINARY_UPGRADE_UNILEVEL_PERCENT),
            "stairstep": get_decimal(settings, BINARY_UPGRADE_STAIRSTEP_PERCENT),
            "leadership": get_decimal(settings, BINARY_UPGRADE_LEADERSHIP_PERCENT),
        },
    )


# ═══════════════════════════════════════════════════════════════════════════
# AI CREDIT TIERS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CreditTier:
    """One AI credit package; its dailyCap replaces the global binary cap for owners."""
    price: Decimal
    cost: Decimal
    credits: int
    images: int
    videos: int
    max_video_seconds: int
    max_audio_seconds: int
    daily_cap: Decimal


MAX_CREDIT_TIERS = 3

TIER_KEY_PATTERN = re.compile(r"^ai_credit_tier_(\d)_(\w+)$")


def default_credit_tiers() -> List[CreditTier]:
    """Built-in tiers used when the store has no tier settings."""
    return [
        CreditTier(Decimal("100"), Decimal("30"), 50, 30, 10, 10, 60, Decimal("1500")),
        CreditTier(Decimal("250"), Decimal("75"), 150, 100, 30, 60, 300, Decimal("3000")),
        CreditTier(Decimal("500"), Decimal("150"), 400, 300, 80, 900, 1800, Decimal("9000")),
    ]


def load_credit_tiers(settings: Mapping[str, str]) -> List[CreditTier]:
    """
    Overlay ai_credit_tier_<n>_<field> keys onto the default tiers.

    Tier numbers are 1-based; numbers outside 1..3 and unknown fields are ignored.
    """
    tiers = default_credit_tiers()

    for key, raw in settings.items():
        match = TIER_KEY_PATTERN.match(key)
        if not match:
            continue

        tierIndex = int(match.group(1)) - 1
        fieldName = match.group(2)
        if tierIndex < 0 or tierIndex >= MAX_CREDIT_TIERS:
            continue

        tier = tiers[tierIndex]
        if fieldName == "price":
            tier.price = parse_decimal(raw, "0")
        elif fieldName == "cost":
            tier.cost = parse_decimal(raw, "0")
        elif fieldName == "credits":
            tier.credits = parse_int(raw, "0")
        elif fieldName == "image":
            tier.images = parse_int(raw, "0")
        elif fieldName == "video":
            tier.videos = parse_int(raw, "0")
        elif fieldName == "videoseconds":
            tier.max_video_seconds = parse_int(raw, "0")
        elif fieldName == "audioseconds":
            tier.max_audio_seconds = parse_int(raw, "0")
        elif fieldName == "daily_cap":
            tier.daily_cap = parse_decimal(raw, "5000")

    return tiers
