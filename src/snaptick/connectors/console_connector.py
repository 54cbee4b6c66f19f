# src/snaptick/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import CommandContext, registry as command_registry
from ..core.rollover import RolloverResult, RolloverState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def emit(text: str) -> None:
    """Line sink for reminders and platform actions (may be called from the view-model thread)."""
    _print_ts(text)


def describe_rollover(result: RolloverResult | None) -> str | None:
    if result is None:
        return None
    if result.state == RolloverState.NEVER_OPENED:
        return "Welcome! Your streak starts today."
    if result.state == RolloverState.OPENED_PRIOR_DAY:
        msg = f"New day: streak {result.streak}"
        if result.reset_count:
            msg += f", {result.reset_count} repeat task(s) reset"
        return msg + "."
    return None


def run_console_loop(ctx: CommandContext, rollover: RolloverResult | None = None) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /list for today's tasks. Use /exit to quit.\n")

    greeting = describe_rollover(rollover)
    if greeting:
        _print_ts(greeting)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(ctx, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list them."
        _print_ts(response)

    logger.info("Console connector finished.")
