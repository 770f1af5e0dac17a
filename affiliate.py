# affiliate/affiliate.py
"""
Affiliate payout engine - main entry point.
Wires configuration, database, listeners and the read model refresh loop.
"""
import asyncio
import logging
import signal
import sys

from config import Config
from core.db import setup_database
from models.listeners import register_all_listeners
from affiliate_system.events.setup import setup_payout_event_handlers, teardown_payout_event_handlers
from affiliate_system.services.read_model import readModel
from background.refresh_scheduler import RefreshScheduler

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Console only until .env is loaded; configure_file_logging adds LOG_FILE
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def configure_file_logging() -> logging.FileHandler:
    """
    Apply LOG_LEVEL and attach the LOG_FILE handler from loaded Config.

    Returns:
        The FileHandler attached to the root logger
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(Config.get(Config.LOG_LEVEL, "INFO"))

    fileHandler = logging.FileHandler(Config.get(Config.LOG_FILE, "affiliate.log"))
    fileHandler.setFormatter(logging.Formatter(LOG_FORMAT))
    rootLogger.addHandler(fileHandler)

    logger.info(f"Logging to {fileHandler.baseFilename}")
    return fileHandler


async def initialize_engine() -> RefreshScheduler:
    """
    Initialize the payout engine with all services.

    Returns:
        Started RefreshScheduler
    """
    try:
        logger.info("=" * 60)
        logger.info("AFFILIATE PAYOUT ENGINE INITIALIZATION")
        logger.info("=" * 60)

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 1: Load configuration from .env
        # ═══════════════════════════════════════════════════════════════════════
        logger.info("📋 Loading configuration from .env...")
        Config.initialize_from_env()
        Config.validate_critical_keys()
        configure_file_logging()
        logger.info("✓ Configuration loaded")

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 2: Setup database
        # ═══════════════════════════════════════════════════════════════════════
        logger.info("💾 Setting up database...")
        setup_database()
        logger.info("✓ Database ready")

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 3: Store listeners and event handlers
        # ═══════════════════════════════════════════════════════════════════════
        logger.info("🎯 Registering listeners and event handlers...")
        register_all_listeners()
        setup_payout_event_handlers()
        logger.info("✓ Listeners registered")

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 4: Warm read model and start polling refresh
        # ═══════════════════════════════════════════════════════════════════════
        readModel.refresh()

        scheduler = RefreshScheduler(readModel)
        await scheduler.start()

        Config.set(Config.SYSTEM_READY, True)

        logger.info("=" * 60)
        logger.info("✅ INITIALIZATION COMPLETE")
        logger.info("=" * 60)

        return scheduler

    except Exception as e:
        logger.critical(f"❌ Initialization failed: {e}", exc_info=True)
        raise


async def main():
    """Main entry point."""
    scheduler = None
    try:
        scheduler = await initialize_engine()

        stopEvent = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stopEvent.set)
            except NotImplementedError:
                # Windows: KeyboardInterrupt still stops asyncio.run
                pass

        logger.info("🔄 Running, waiting for shutdown signal...")
        await stopEvent.wait()

    except Exception as e:
        logger.critical(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if scheduler is not None:
            await scheduler.stop()
        teardown_payout_event_handlers()
        logger.info("👋 Shutdown complete")


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped by user")
