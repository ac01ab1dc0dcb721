"""
Logging bootstrap for the agent.

Usage:
    from scm_agent.config import get_settings
    from scm_agent.logging import configure_logging

    configure_logging(get_settings())  # idempotent

- Plain or JSON (python-json-logger) formatting
- stdout/stderr/file destinations
- Every record carries the simulation ``day`` ("-" outside a day)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from pythonjsonlogger import jsonlogger

_configured = False


def _level_from_str(level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def _make_handler(destination: str, filename: Optional[str]) -> logging.Handler:
    if destination == "stdout":
        return logging.StreamHandler(stream=sys.stdout)
    if destination == "stderr":
        return logging.StreamHandler(stream=sys.stderr)
    path = Path(filename or "scm-agent.log")
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def _make_formatter(json_enabled: bool, fmt: str) -> logging.Formatter:
    if json_enabled:
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(day)s %(message)s"
        )
    return logging.Formatter(fmt)


class DayFilter(logging.Filter):
    """Ensure ``record.day`` exists so format strings can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "day"):
            record.day = "-"
        return True


def configure_logging(settings=None, *, force: bool = False) -> None:
    """
    Configure the root logger from ``settings.logging``. Safe to call repeatedly.

    Params:
      - settings: scm_agent.config.AgentSettings (loaded lazily if None)
      - force: reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    if settings is None:
        from scm_agent.config import get_settings  # lazy import to avoid cycles

        settings = get_settings()

    cfg = settings.logging
    handler = _make_handler(cfg.destination, cfg.filename)
    handler.setFormatter(_make_formatter(cfg.json_format, cfg.format))
    handler.addFilter(DayFilter())

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(_level_from_str(cfg.level))
    root.addHandler(handler)

    # asyncio stays at WARNING or above
    logging.getLogger("asyncio").setLevel(max(root.level, logging.WARNING))

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Mirror of logging.getLogger that makes sure logging is configured."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)
