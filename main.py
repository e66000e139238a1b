import argparse
import logging
import signal

from core.app_context import AppContext
from core.config_loader import load_config
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    # Client.run treats this as a request for a clean shutdown
    raise KeyboardInterrupt


def main():
    parser = argparse.ArgumentParser(description="guildmail Discord notifier")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to the YAML config file (default: config.yaml)')
    parser.add_argument('--init-db', action='store_true',
                        help='Create the database tables and exit')
    args = parser.parse_args()

    config = load_config(args.config)
    logging.getLogger().setLevel(config.log_level.upper())

    signal.signal(signal.SIGTERM, signal_handler)

    context = AppContext.build(config)
    try:
        # Initialize DB (with retry logic)
        init_db(context.store)
        if args.init_db:
            return

        from bot.client import run_bot
        run_bot(context)
    finally:
        context.close()
        logger.info("Stopped")


if __name__ == "__main__":
    main()
