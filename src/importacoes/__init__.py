"""
Core package for the import job tracking console.
Contains the ingestion API client, submission and reprocess flows, and the
self-polling job list.
"""

import importacoes.logging  # noqa: F401  Ensures logging is configured
from importacoes.config import config
from importacoes.console import ImportacaoConsole

__all__ = [
    "config",
    "ImportacaoConsole",
]
