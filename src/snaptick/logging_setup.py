# src/snaptick/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers that talk on every write or timer; the console shares the REPL with
# the user, so only their problems are shown there.
_CHATTY_PREFIXES = (
    "snaptick.tasks.task_store",
    "snaptick.prefs.",
    # the notifier already prints the reminder itself
    "snaptick.notifications.",
    "snaptick.cli.runner",
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable:
    - snaptick logs pass, except the chatty layers above (WARNING+ only)
    - everything else (third-party, 'py.warnings') only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("snaptick."):
            if name.startswith(_CHATTY_PREFIXES):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def resolve_level(level: int | str, default: int = logging.INFO) -> int:
    """Accept a logging level as int or name ("debug", "WARNING")."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/snaptick",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path:
    """
    Console handler filtered for REPL use plus a full `snaptick.log` in
    `log_dir`. Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "snaptick.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(resolve_level(console_level))
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(resolve_level(file_level, logging.DEBUG))
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return log_file
