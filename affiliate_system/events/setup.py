# affiliate_system/events/setup.py
"""
Setup payout event handlers.
Register all event handlers with the event bus.
"""
import logging

from affiliate_system.events.event_bus import eventBus, PayoutEvents
from affiliate_system.events.handlers import (
    handle_settings_changed,
    handle_user_figures_changed,
    handle_summary_changed,
)

logger = logging.getLogger(__name__)

SUBSCRIPTIONS = (
    (PayoutEvents.SETTINGS_CHANGED, handle_settings_changed),
    (PayoutEvents.REVENUE_RECORDED, handle_user_figures_changed),
    (PayoutEvents.POSITION_UPDATED, handle_user_figures_changed),
    (PayoutEvents.DAILY_EARNING_UPDATED, handle_user_figures_changed),
    (PayoutEvents.DAILY_SUMMARY_UPDATED, handle_summary_changed),
)


def setup_payout_event_handlers():
    """
    Register all payout event handlers with the event bus.

    This function should be called during application startup.
    """
    logger.info("Setting up payout event handlers...")

    for eventName, handler in SUBSCRIPTIONS:
        eventBus.subscribe(eventName, handler)
        logger.debug(f"Registered handler for {eventName}")

    logger.info("Payout event handlers registered successfully")


def teardown_payout_event_handlers():
    """
    Unregister all payout event handlers.
    Useful for testing or shutdown.
    """
    logger.info("Tearing down payout event handlers...")

    for eventName, handler in SUBSCRIPTIONS:
        eventBus.unsubscribe(eventName, handler)

    logger.info("Payout event handlers unregistered")
