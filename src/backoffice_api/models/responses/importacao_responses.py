"""
Import job response models.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from importacoes.models import ExcelAnalise, ImportEvent, ImportJob, ImportJobPage
from importacoes.views import DetailResult, Notification


class ImportEventResponse(BaseModel):
    id: str
    status: str
    category: str = Field(..., description="success, danger, warn or neutral")
    message: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_event(cls, event: ImportEvent) -> "ImportEventResponse":
        return cls(
            id=event.id,
            status=event.status,
            category=event.category.value,
            message=event.message,
            created_at=event.created_at,
        )


class ImportJobResponse(BaseModel):
    """One import job as last observed on the ingestion API."""

    id: str
    status: str
    category: str = Field(..., description="success, danger, warn or neutral")
    is_terminal: bool
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
    file_key: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    user_email: Optional[str] = None
    events: List[ImportEventResponse] = Field(default_factory=list)

    class Config:
        json_encoders = {datetime: lambda v: v.isoformat()}

    @classmethod
    def from_job(cls, job: ImportJob) -> "ImportJobResponse":
        return cls(
            id=job.id,
            status=job.status,
            category=job.category.value,
            is_terminal=job.is_terminal,
            fidc_id=job.fidc_id,
            origem=job.origem,
            tipo_arquivo=job.tipo_arquivo,
            tipo_banco=job.tipo_banco,
            tipo_cnab=job.tipo_cnab,
            modalidade=job.modalidade,
            cedente_id=job.cedente_id,
            file_name=job.file_name,
            file_hash=job.file_hash,
            error_summary=job.error_summary,
            ultimo_codigo_falha=job.ultimo_codigo_falha,
            tentativas=job.tentativas,
            ultima_tentativa_em=job.ultima_tentativa_em,
            correlation_id=job.correlation_id,
            ultimo_message_id=job.ultimo_message_id,
            file_key=job.file_key,
            created_at=job.created_at,
            completed_at=job.completed_at,
            user_email=job.user_email,
            events=[ImportEventResponse.from_event(event) for event in job.events],
        )


class ImportJobPageResponse(BaseModel):
    """Current list snapshot plus the poller state it produced."""

    items: List[ImportJobResponse]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    poller_state: str = Field(..., description="IDLE or POLLING")
    error: Optional[str] = Field(
        None, description="Message of the last failed fetch, if it failed"
    )

    @classmethod
    def from_page(
        cls, page: ImportJobPage, poller_state: str, error: Optional[str] = None
    ) -> "ImportJobPageResponse":
        return cls(
            items=[ImportJobResponse.from_job(job) for job in page.items],
            page=page.page,
            page_size=page.page_size,
            total_items=page.total_items,
            total_pages=page.total_pages,
            poller_state=poller_state,
            error=error,
        )


class ImportacaoDetailResponse(BaseModel):
    importacao_id: str
    job: ImportJobResponse

    @classmethod
    def from_result(cls, result: DetailResult) -> "ImportacaoDetailResponse":
        return cls(
            importacao_id=result.importacao_id,
            job=ImportJobResponse.from_job(result.job),
        )


class ImportacaoCreatedResponse(BaseModel):
    importacao_id: str = Field(..., description="Id assigned by the ingestion API")
    message: str = Field(..., description="Human-readable status message")

    class Config:
        json_schema_extra = {
            "example": {
                "importacao_id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                "message": "Importação enviada para processamento.",
            }
        }


class ReprocessResponse(BaseModel):
    importacao_id: str
    message: str
    job: Optional[ImportJobResponse] = Field(
        None, description="Job as re-fetched right after the request"
    )


class PollerStatusResponse(BaseModel):
    state: str = Field(..., description="IDLE or POLLING")
    interval_seconds: float


class LiveUpdatesStatusResponse(BaseModel):
    status: str = Field(..., description="connecting, connected or disconnected")
    empresa_ids: List[str] = Field(default_factory=list)


class NotificationResponse(BaseModel):
    level: str
    message: str
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            level=notification.level.value,
            message=notification.message,
            created_at=notification.created_at,
        )


class ExcelAnaliseErroResponse(BaseModel):
    line_number: int
    code: str
    message: str
    column: Optional[str] = None
    value: Optional[str] = None


class ExcelAnaliseAvisoResponse(BaseModel):
    code: str
    message: str
    line_number: Optional[int] = None


class ExcelAnaliseResponse(BaseModel):
    """Result of the pre-import analysis of an Excel file."""

    analysis_id: str
    file_name: str
    status: str
    can_import: bool
    total_linhas: int = 0
    linhas_validas: int = 0
    linhas_com_erro: int = 0
    avisos: int = 0
    duplicados_ignorados: int = 0
    errors: List[ExcelAnaliseErroResponse] = Field(default_factory=list)
    warnings: List[ExcelAnaliseAvisoResponse] = Field(default_factory=list)
    expires_at: Optional[datetime] = None

    @classmethod
    def from_analise(cls, analise: ExcelAnalise) -> "ExcelAnaliseResponse":
        summary = analise.summary
        return cls(
            analysis_id=analise.analysis_id,
            file_name=analise.file_name,
            status=analise.status,
            can_import=analise.can_import,
            total_linhas=summary.total_linhas,
            linhas_validas=summary.linhas_validas,
            linhas_com_erro=summary.linhas_com_erro,
            avisos=summary.avisos,
            duplicados_ignorados=summary.duplicados_ignorados,
            errors=[
                ExcelAnaliseErroResponse(
                    line_number=error.line_number,
                    code=error.code,
                    message=error.message,
                    column=error.column,
                    value=error.value,
                )
                for error in analise.errors
            ],
            warnings=[
                ExcelAnaliseAvisoResponse(
                    code=warning.code,
                    message=warning.message,
                    line_number=warning.line_number,
                )
                for warning in analise.warnings
            ],
            expires_at=analise.expires_at,
        )
