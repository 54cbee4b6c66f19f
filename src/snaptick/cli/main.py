# src/snaptick/cli/main.py

"""
CLI entrypoint.

Initializes logging, wires the app, then:
- runs the view-model (hydration, daily rollover, reminders) on an asyncio
  loop in a background thread,
- runs the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..config import get_settings
from ..connectors.console_connector import emit, run_console_loop
from ..logging_setup import setup_logging
from .bootstrap import create_app
from .runner import start_viewmodel_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    setup_logging(log_dir=settings.data_dir, console_level=getattr(settings, "log_level", "INFO"))

    logger.info("Starting %s %s...", settings.app_name, settings.build_version)

    app = create_app(settings=settings, emit=emit)
    runner = start_viewmodel_in_background(app)
    if runner is None:
        logger.error("Could not start the view-model; exiting.")
        raise SystemExit(1)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not on the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(runner, rollover=runner.rollover)
            stop_main.set()
        else:
            signal.signal(signal.SIGINT, _handle_signal)
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        runner.stop()
        runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
