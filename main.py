"""
Helix Task Bot - Main Entry Point

Loads the configuration, sets up logging and runs the Movement testnet task
pipeline (fund, claim, stake, compound, unstake) for every account in
``pk.txt``, either once or on a recurring schedule.

Usage:
    python main.py                      # Run once, or forever if scheduler.enabled
    python main.py --once               # Force a single run
    python main.py --config my.json     # Use another config file
    python main.py --keys keys.txt --proxies proxies.txt
"""
from dotenv import load_dotenv

# Load environment variables from .env file into os.environ
load_dotenv()

import asyncio
import argparse
import logging
import signal
import sys
from typing import List, Optional

from core.batch import BatchRunner
from core.config import BotSettings
from core.errors import NoAccountsError
from core.logging_setup import setup_logging
from core.reporter import TaskReporter
from core.scheduler import Scheduler

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Helix Labs testnet task bot")
    parser.add_argument("--config", type=str, help="Path to config.json")
    parser.add_argument("--once", action="store_true", help="Run a single batch even if the scheduler is enabled")
    parser.add_argument("--keys", type=str, help="Private key file (one key per line)")
    parser.add_argument("--proxies", type=str, help="Proxy file (one proxy per line)")
    parser.add_argument("--log-level", type=str, help="Logging level (DEBUG, INFO, ...)")
    return parser


def load_settings(args: argparse.Namespace) -> BotSettings:
    settings = BotSettings.from_config_file(
        args.config,
        private_keys_file=args.keys,
        proxies_file=args.proxies,
        log_level=args.log_level,
    )
    if args.once and settings.scheduler.enabled:
        settings = settings.model_copy(
            update={"scheduler": settings.scheduler.model_copy(update={"enabled": False})},
        )
    return settings


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution flow.

    1. Parses command line arguments and loads settings.
    2. Sets up logging.
    3. Builds the batch runner and scheduler.
    4. Runs once or forever, stopping on SIGTERM.

    Returns:
        Process exit status: ``1`` when a single run fails, ``0`` otherwise.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except (OSError, ValueError) as e:
        setup_logging(args.log_level or "INFO")
        logger.error(f"❌ Failed to load configuration: {e}")
        return 1

    setup_logging(settings.log_level)
    reporter = TaskReporter()
    runner = BatchRunner.from_settings(settings, reporter=reporter)
    scheduler = Scheduler(settings, runner, reporter=reporter)

    def handle_sigterm():
        logger.info("🛑 Received SIGTERM. Stopping after the current step...")
        scheduler.stop()

    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGTERM, handle_sigterm)

    try:
        await scheduler.start()
    except NoAccountsError as e:
        logger.error(f"❌ {e}")
        return 1
    except Exception as e:
        logger.exception(f"❌ Fatal error: {e}")
        return 1
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
