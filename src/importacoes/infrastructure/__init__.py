"""
Infrastructure layer for importacoes: ingestion API access and its
live change notifications.
"""

from importacoes.infrastructure.importacao_repository import (
    EMPRESA_HEADER,
    ImportacaoRepository,
)
from importacoes.infrastructure.live_updates import (
    ConnectionStatus,
    ImportacaoLiveUpdates,
)

__all__ = [
    "ImportacaoRepository",
    "EMPRESA_HEADER",
    "ConnectionStatus",
    "ImportacaoLiveUpdates",
]
