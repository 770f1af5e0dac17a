# affiliate_system/events/handlers.py
"""
Event handlers for the payout engine.
Store changes only invalidate read model entries; recomputation is lazy.
"""
import logging
from typing import Dict, Any

from affiliate_system.services.read_model import readModel, ReadModelScope

logger = logging.getLogger(__name__)


def handle_settings_changed(data: Dict[str, Any]):
    """
    Handle SETTINGS_CHANGED event.

    Any setting may feed any snapshot (cycle volume, caps, tiers),
    so everything derived from settings is dropped.
    """
    logger.debug(f"Setting '{data.get('key')}' changed, invalidating settings")
    readModel.invalidate(ReadModelScope.SETTINGS)


def handle_user_figures_changed(data: Dict[str, Any]):
    """
    Handle POSITION_UPDATED, DAILY_EARNING_UPDATED and REVENUE_RECORDED.

    Events without a userId drop every user snapshot.
    """
    readModel.invalidate(ReadModelScope.USER, data.get("userId"))


def handle_summary_changed(data: Dict[str, Any]):
    """Handle DAILY_SUMMARY_UPDATED."""
    readModel.invalidate(ReadModelScope.ADMIN)
