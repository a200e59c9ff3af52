# src/lifeos/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Console thresholds by logger-name prefix; first match wins.
_CONSOLE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    # One line per subscriber per reminder; the dispatcher summary is enough on screen.
    ("lifeos.push.webpush_transport", logging.WARNING),
    ("lifeos.", logging.NOTSET),
    ("py.warnings", logging.ERROR),
)

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the operator console readable while the scheduler thread is ticking.

    lifeos logs pass (per-subscriber transport logs only at WARNING+);
    everything else, pywebpush/urllib3/py.warnings included, only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, threshold in _CONSOLE_THRESHOLDS:
            if record.name.startswith(prefix):
                return record.levelno >= threshold
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/lifeos",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> Path:
    """
    Console handler (filtered) plus a rotating file handler with everything.

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "lifeos.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        str(log_file), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # pywebpush dumps request bodies and headers at DEBUG.
    logging.getLogger("pywebpush").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return log_file
