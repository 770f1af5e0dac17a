"""
Database models for the affiliate payout engine.
Import all models here for easy access.
"""

# Base and mixins
from models.base import Base, AuditMixin

# Core models
from models.app_setting import AppSetting
from models.revenue_event import RevenueEvent, RevenueKind, ImmutableRecordError
from models.ai_pricing import AIProviderPricing

# Binary models
from models.binary.position import BinaryPosition
from models.binary.daily_earning import BinaryDailyEarning
from models.binary.daily_summary import BinaryDailySummary

# Event listeners
from models.listeners import register_all_listeners

__all__ = [
    # Base
    'Base',
    'AuditMixin',

    # Core
    'AppSetting',
    'RevenueEvent',
    'RevenueKind',
    'ImmutableRecordError',
    'AIProviderPricing',

    # Binary
    'BinaryPosition',
    'BinaryDailyEarning',
    'BinaryDailySummary',

    # Listeners
    'register_all_listeners',
]
