"""
Logging helpers for the importacoes core package.
"""

from importacoes.logging.setup import (
    clear_importacao_id,
    configure_logging,
    get_importacao_id,
    set_importacao_id,
)

configure_logging()

__all__ = [
    "configure_logging",
    "set_importacao_id",
    "clear_importacao_id",
    "get_importacao_id",
]
