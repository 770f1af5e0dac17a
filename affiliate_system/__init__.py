"""
Affiliate System - revenue splits and binary cycle estimates for the payout engine.
"""

# Calculators
from affiliate_system.services.revenue_split_service import RevenueSplitCalculator
from affiliate_system.services.cycle_service import CycleMatchEstimator, SimulatorSettings

# Services
from affiliate_system.services.settings_service import SettingsService
from affiliate_system.services.accounting_service import AccountingService
from affiliate_system.services.ai_pricing_service import AIPricingService
from affiliate_system.services.read_model import DashboardReadModel, readModel

# Configuration
from affiliate_system.config.settings import CommissionConfig, BinarySettings, CreditTier

# Utilities
from affiliate_system.utils.time_machine import timeMachine

# Events
from affiliate_system.events.event_bus import eventBus, PayoutEvents

__all__ = [
    # Calculators
    'RevenueSplitCalculator',
    'CycleMatchEstimator',
    'SimulatorSettings',

    # Services
    'SettingsService',
    'AccountingService',
    'AIPricingService',
    'DashboardReadModel',
    'readModel',

    # Config
    'CommissionConfig',
    'BinarySettings',
    'CreditTier',

    # Utils
    'timeMachine',

    # Events
    'eventBus',
    'PayoutEvents',
]
