"""
Import job data structures as observed from the ingestion API.

Every instance is an immutable snapshot of one fetch; a refresh produces new
objects instead of touching the previous ones.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class ImportacaoStatus(Enum):
    PROCESSANDO = "PROCESSANDO"
    VALIDADO = "VALIDADO"
    PENDENTE = "PENDENTE"
    FINALIZADO_SUCESSO = "FINALIZADO_SUCESSO"
    FINALIZADO_FALHA = "FINALIZADO_FALHA"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ImportacaoStatus"]:
        """Map a wire value to a member, None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def is_terminal(cls, status: Optional[str]) -> bool:
        """Check if status is terminal (no automatic transition follows)."""
        return status in (cls.FINALIZADO_SUCESSO.value, cls.FINALIZADO_FALHA.value)

    @classmethod
    def is_processing(cls, status: Optional[str]) -> bool:
        """Check if status means the remote worker still owns the job."""
        return status in (
            cls.PROCESSANDO.value,
            cls.VALIDADO.value,
            cls.PENDENTE.value,
        )


TERMINAL_STATUSES = frozenset(
    {ImportacaoStatus.FINALIZADO_SUCESSO.value, ImportacaoStatus.FINALIZADO_FALHA.value}
)

# Status written by the API when a job is manually retried
REPROCESS_EVENT_STATUS = "REPROCESSAR"


class StatusCategory(Enum):
    SUCCESS = "success"
    DANGER = "danger"
    WARN = "warn"
    NEUTRAL = "neutral"


def status_category(status: Optional[str]) -> StatusCategory:
    """Styling category for a job or event status."""
    if status == ImportacaoStatus.FINALIZADO_SUCESSO.value:
        return StatusCategory.SUCCESS
    if status == ImportacaoStatus.FINALIZADO_FALHA.value:
        return StatusCategory.DANGER
    if ImportacaoStatus.is_processing(status):
        return StatusCategory.WARN
    return StatusCategory.NEUTRAL


class TipoArquivo(Enum):
    CNAB = "CNAB"
    XML = "XML"
    ZIP = "ZIP"
    EXCEL = "EXCEL"

    @classmethod
    def from_file_name(cls, file_name: str) -> "TipoArquivo":
        """Infer the declared format from the file extension."""
        dot = file_name.rfind(".")
        extension = file_name[dot:].lower() if dot >= 0 else ""
        if extension == ".xml":
            return cls.XML
        if extension == ".zip":
            return cls.ZIP
        if extension == ".xlsx":
            return cls.EXCEL
        return cls.CNAB


@dataclass(frozen=True)
class ImportEvent:
    """One entry of a job's append-only audit trail."""

    id: str
    status: str
    message: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def category(self) -> StatusCategory:
        return status_category(self.status)


@dataclass(frozen=True)
class ImportJob:
    """A tracked ingestion request."""

    id: str
    status: str
    fidc_id: Optional[str] = None
    origem: Optional[str] = None
    tipo_arquivo: Optional[str] = None
    tipo_banco: Optional[str] = None
    tipo_cnab: Optional[str] = None
    modalidade: Optional[str] = None
    cedente_id: Optional[str] = None
    file_name: Optional[str] = None
    file_hash: Optional[str] = None
    error_summary: Optional[str] = None
    ultimo_codigo_falha: Optional[str] = None
    tentativas: int = 0
    ultima_tentativa_em: Optional[datetime] = None
    correlation_id: Optional[str] = None
    ultimo_message_id: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    user_email: Optional[str] = None
    file_key: Optional[str] = None
    events: Tuple[ImportEvent, ...] = field(default_factory=tuple)

    @property
    def is_terminal(self) -> bool:
        return ImportacaoStatus.is_terminal(self.status)

    @property
    def known_status(self) -> Optional[ImportacaoStatus]:
        return ImportacaoStatus.parse(self.status)

    @property
    def category(self) -> StatusCategory:
        return status_category(self.status)


@dataclass(frozen=True)
class ImportJobPage:
    """One page of the job listing."""

    items: Tuple[ImportJob, ...]
    page: int = 1
    page_size: int = 10
    total_items: int = 0
    total_pages: int = 1

    @property
    def has_active_jobs(self) -> bool:
        """True when at least one listed job is not terminal."""
        return any(not item.is_terminal for item in self.items)
