# src/sales_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the one-time initial load, then
starts the console REPL (or prints a summary when the console is disabled).
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, load_initial_tasks
from ..cli.commands import cmd_metrics
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(settings)

    logger.info("Starting %s (log file %s)...", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    asyncio.run(load_initial_tasks(state))

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            print(cmd_metrics(state, []))
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
