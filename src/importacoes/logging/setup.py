"""
Centralized logging configuration with importacao_id propagation.
"""

from __future__ import annotations

import os
import sys
from contextvars import ContextVar
from typing import Optional

from loguru import logger

IMPORTACAO_ID_DEFAULT = "-"
_importacao_id_var: ContextVar[str] = ContextVar(
    "importacao_id", default=IMPORTACAO_ID_DEFAULT
)
_is_configured = False

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | importacao_id={extra[importacao_id]} | "
    "{name}:{function}:{line} - {message}"
)


def _patch_record(record):
    """Inject the contextual importacao_id into every log record."""
    record["extra"]["importacao_id"] = _importacao_id_var.get(IMPORTACAO_ID_DEFAULT)


def configure_logging(level: Optional[str] = None):
    """Configure Loguru once with the standard format and patcher."""
    global _is_configured
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger.remove()
    if not _is_configured:
        logger.configure(
            extra={"importacao_id": IMPORTACAO_ID_DEFAULT}, patcher=_patch_record
        )

    logger.add(
        sys.stdout,
        level=log_level,
        format=LOG_FORMAT,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )

    _is_configured = True


def set_importacao_id(importacao_id: Optional[str]) -> None:
    """Set the contextual importacao_id for subsequent log statements."""
    _importacao_id_var.set(importacao_id or IMPORTACAO_ID_DEFAULT)


def clear_importacao_id() -> None:
    """Clear the contextual importacao_id."""
    _importacao_id_var.set(IMPORTACAO_ID_DEFAULT)


def get_importacao_id() -> str:
    """Retrieve the current contextual importacao_id."""
    return _importacao_id_var.get(IMPORTACAO_ID_DEFAULT)
