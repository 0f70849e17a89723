from __future__ import annotations
import logging
import os
import sys
from typing import IO, Iterable, Optional

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "qdrant_client", "uvicorn.access")

LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',  # Cyan
    logging.INFO: '\033[32m',  # Green
    logging.WARNING: '\033[33m',  # Yellow
    logging.ERROR: '\033[31m',  # Red
    logging.CRITICAL: '\033[35m',  # Magenta
}
RESET = '\033[0m'
BOLD = '\033[1m'


def short_name(name: str) -> str:
    """`src.ragq.api.routers.prompt` -> `src...prompt`, `ragq.api` -> `api`."""
    parts = name.split('.')
    if len(parts) > 2:
        return f"{parts[0]}...{parts[-1]}"
    return parts[-1]


class ColoredFormatter(logging.Formatter):
    """Level-colored formatter with shortened logger names."""

    def __init__(self, use_color: bool = True):
        sep = f"{LEVEL_COLORS[logging.INFO]}║{RESET}" if use_color else "|"
        super().__init__(
            fmt=f"%(asctime)s {sep} %(levelname)s {sep} %(name)-15s {sep} %(message)s",
            datefmt="%H:%M:%S",
        )
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers must see the untouched record
        record = logging.makeLogRecord(record.__dict__)
        record.name = short_name(record.name)
        color = LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            record.levelname = f"{color}{BOLD}{record.levelname:8}{RESET}"
        else:
            record.levelname = f"{record.levelname:8}"
        return super().format(record)


def _wants_color(stream: IO) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def setup_logging(
        level: str = "INFO",
        stream: Optional[IO] = None,
        quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Attach one colored stdout handler to the root logger. Later calls are no-ops."""
    root = logging.getLogger()
    if root.handlers:
        return

    stream = stream or sys.stdout
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(use_color=_wants_color(stream)))
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
