# core/logging_config.py
from __future__ import annotations
import logging
import sys
from typing import Optional

_configured = False


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter; appends any `extra=` fields as key=value."""

    _std = set(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    ) | {"message", "asctime"}

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)8s | %(name)20s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {
            k: v
            for k, v in record.__dict__.items()
            if k not in self._std and not k.startswith("_")
        }
        if not extras:
            return base
        return base + " | " + " ".join(f"{k}={v}" for k, v in extras.items())


def setup_logging(level: Optional[str] = "INFO") -> None:
    """Configure the root logger once for the route-metrics backend."""
    global _configured
    root = logging.getLogger()
    root.setLevel((level or "INFO").upper())
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(DevelopmentFormatter())
    root.addHandler(handler)

    # httpx logs every request at INFO; keep it quieter
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
