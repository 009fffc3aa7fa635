#!/usr/bin/env python3
"""Main entry point for Device Guard."""

import sys

from device_guard.cli import main as cli_main
from device_guard.common.config import Config
from device_guard.common.logging import configure_logging, get_logger

logger = get_logger(__name__)


def main():
    """Main entry point."""
    config = Config()
    configure_logging(config.log_level.value)
    logger.info(f"Device Guard initialized in {config.environment.value} mode")
    logger.info(f"Policy file: {config.resolved_policy_file}")
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
