"""Main entry point for the Unfuddle to Slack sync job."""

import argparse
import logging
import sys

from .config import load_config
from .scheduler import run_every
from .sync import SyncOrchestrator

logger = logging.getLogger(__name__)


# LOG_LEVEL numbers follow Ruby's Logger severities: DEBUG=0 ... FATAL=4, UNKNOWN=5
NUMERIC_LOG_LEVELS = {
    0: logging.DEBUG,
    1: logging.INFO,
    2: logging.WARNING,
    3: logging.ERROR,
    4: logging.CRITICAL,
    5: logging.CRITICAL,
}


def resolve_log_level(level: str) -> int:
    """Map a LOG_LEVEL value (name or Logger severity number) to a logging level."""
    if level.isdigit():
        return NUMERIC_LOG_LEVELS.get(int(level), logging.CRITICAL)
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(level: str) -> None:
    """Configure root logging to stdout; accepts level names or numbers."""
    logging.basicConfig(
        level=resolve_log_level(level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main(argv=None) -> int:
    """Main entry point with command-line argument parsing."""
    parser = argparse.ArgumentParser(
        description="Post new Unfuddle project activity to a Slack channel"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sync cycle and exit instead of polling every POLL_INTERVAL seconds",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (default: search from the current directory)",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.env_file)
    except ValueError as e:
        configure_logging("INFO")
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(config.log_level)
    orchestrator = SyncOrchestrator(config)

    if args.once:
        report = orchestrator.run_cycle()
        return 0 if report.ok else 1

    logger.info(
        f"Polling Unfuddle project {config.unfuddle.project_id} every "
        f"{config.scheduler.poll_interval_seconds} seconds"
    )
    try:
        run_every(orchestrator.run_cycle, config.scheduler.poll_interval_seconds)
    except KeyboardInterrupt:
        logger.info("Stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
