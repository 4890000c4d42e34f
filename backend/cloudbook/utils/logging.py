from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Client libraries that log every HTTP round trip at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "postgrest", "supabase")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout. Later calls only adjust the level."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger().setLevel(resolved)

    for name in ("uvicorn", "uvicorn.access", "fastapi"):
        logging.getLogger(name).setLevel(logging.INFO)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("cloudbook").debug("Logging configured", extra={"level": level})


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
