"""Loguru setup with a per-request id carried through a ContextVar."""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path

from loguru import logger as _loguru

from .sensitive_filter import sanitize_record

LINE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_request_id: ContextVar[str] = ContextVar("authapp_request_id", default="-")


def _default_log_file() -> Path:
    override = os.getenv("LOG_FILE")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[3] / "instance" / "app.log"


class _StdlibBridge(logging.Handler):
    """Forwards werkzeug and sqlalchemy records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _loguru.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _loguru.opt(depth=6, exception=record.exc_info).bind(
            correlation_id=_request_id.get()
        ).log(level, record.getMessage())


class ContextualLogger:
    """Looks up the current request id on every call."""

    def __getattr__(self, name: str):
        return getattr(_loguru.bind(correlation_id=_request_id.get()), name)


def set_correlation_id(value: str | None) -> None:
    _request_id.set(value or "-")


def get_correlation_id() -> str:
    return _request_id.get()


def clear_correlation_id() -> None:
    _request_id.set("-")


def setup_logging(*, debug_mode: bool = False, level: str | None = None) -> None:
    level = (level or os.getenv("LOG_LEVEL") or ("DEBUG" if debug_mode else "INFO")).upper()
    log_file = _default_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    _loguru.remove()
    _loguru.configure(extra={"correlation_id": "-"})
    shared = {"level": level, "format": LINE_FORMAT, "filter": sanitize_record, "diagnose": False}
    _loguru.add(sys.stderr, colorize=True, **shared)
    _loguru.add(str(log_file), colorize=False, enqueue=True, encoding="utf-8", **shared)

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
