"""
Import job models.
"""

from importacoes.models.excel_analise import (
    ExcelAnalise,
    ExcelAnaliseAviso,
    ExcelAnaliseErro,
    ExcelAnaliseResumo,
    ExcelAnaliseStatus,
)
from importacoes.models.importacao import (
    REPROCESS_EVENT_STATUS,
    TERMINAL_STATUSES,
    ImportacaoStatus,
    ImportEvent,
    ImportJob,
    ImportJobPage,
    StatusCategory,
    TipoArquivo,
    status_category,
)
from importacoes.models.submission import ImportacaoUpload, SelectedFile, SubmissionForm

__all__ = [
    "ImportacaoStatus",
    "ImportEvent",
    "ImportJob",
    "ImportJobPage",
    "StatusCategory",
    "TipoArquivo",
    "TERMINAL_STATUSES",
    "REPROCESS_EVENT_STATUS",
    "status_category",
    "ExcelAnalise",
    "ExcelAnaliseAviso",
    "ExcelAnaliseErro",
    "ExcelAnaliseResumo",
    "ExcelAnaliseStatus",
    "ImportacaoUpload",
    "SelectedFile",
    "SubmissionForm",
]
