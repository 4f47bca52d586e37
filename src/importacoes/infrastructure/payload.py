"""
Normalization of ingestion API payloads.

The API is inconsistent about field casing (``fidcId`` vs ``FidcId``) and
sometimes wraps bodies in a ``{model, success, code, errors}`` envelope. All
of that is resolved here; nothing outside this module looks at raw payloads.
"""

import re
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger

from importacoes.exceptions import GENERIC_ERROR_MESSAGE
from importacoes.models import (
    ExcelAnalise,
    ExcelAnaliseAviso,
    ExcelAnaliseErro,
    ExcelAnaliseResumo,
    ImportEvent,
    ImportJob,
    ImportJobPage,
)

_ENVELOPE_MARKERS = ("success", "code", "errors")
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def as_record(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def read_field(record: Dict[str, Any], *keys: str) -> Any:
    """Return the first non-null value among the given keys."""
    for key in keys:
        found = record.get(key)
        if found is not None:
            return found
    return None


def _cased(record: Dict[str, Any], name: str) -> Any:
    return read_field(record, name, name[:1].upper() + name[1:])


def _optional_str(record: Dict[str, Any], name: str) -> Optional[str]:
    value = _cased(record, name)
    return str(value) if value not in (None, "") else None


def _to_int(value: Any, fallback: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _to_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = _LONG_FRACTION.sub(r"\1", str(value))
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable timestamp from ingestion API: {value!r}")
        return None


def unwrap_envelope(payload: Any) -> Any:
    """Strip the ``{model, success|code|errors}`` envelope when present."""
    if isinstance(payload, dict) and "model" in payload:
        if any(marker in payload for marker in _ENVELOPE_MARKERS):
            return payload["model"]
    return payload


def extract_error_message(payload: Any) -> str:
    """User-facing message from an error body, with a generic fallback."""
    record = as_record(payload)
    errors = record.get("errors")
    if isinstance(errors, list) and errors:
        first = as_record(errors[0])
        for key in ("value", "message"):
            if first.get(key):
                return str(first[key])
    for key in ("detail", "message"):
        if record.get(key):
            return str(record[key])
    return GENERIC_ERROR_MESSAGE


def map_event(raw: Any) -> ImportEvent:
    record = as_record(raw)
    event_id = _cased(record, "id")
    return ImportEvent(
        id=str(event_id) if event_id is not None else uuid.uuid4().hex,
        status=str(_cased(record, "status") or "EVENTO"),
        message=_optional_str(record, "message"),
        created_at=_to_datetime(_cased(record, "createdAt")),
    )


def map_importacao(raw: Any) -> ImportJob:
    """Map a list item or a detail payload into an ImportJob."""
    record = as_record(raw)
    raw_events = read_field(record, "eventos", "Eventos", "events", "Events")
    events = (
        tuple(map_event(evento) for evento in raw_events)
        if isinstance(raw_events, list)
        else ()
    )

    return ImportJob(
        id=str(_cased(record, "id") or ""),
        status=str(_cased(record, "status") or "PENDENTE"),
        fidc_id=_optional_str(record, "fidcId"),
        origem=_optional_str(record, "origem"),
        tipo_arquivo=_optional_str(record, "tipoArquivo"),
        tipo_banco=_optional_str(record, "tipoBanco"),
        tipo_cnab=_optional_str(record, "tipoCnab"),
        modalidade=_optional_str(record, "modalidade"),
        cedente_id=_optional_str(record, "cedenteId"),
        file_name=_optional_str(record, "fileName"),
        file_hash=_optional_str(record, "fileHash"),
        error_summary=_optional_str(record, "errorSummary"),
        ultimo_codigo_falha=_optional_str(record, "ultimoCodigoFalha"),
        tentativas=_to_int(_cased(record, "tentativas"), 0),
        ultima_tentativa_em=_to_datetime(_cased(record, "ultimaTentativaEm")),
        correlation_id=_optional_str(record, "correlationId"),
        ultimo_message_id=_optional_str(record, "ultimoMessageId"),
        created_at=_to_datetime(_cased(record, "createdAt")),
        completed_at=_to_datetime(_cased(record, "completedAt")),
        user_email=_optional_str(record, "userEmail"),
        file_key=_optional_str(record, "fileKey"),
        events=events,
    )


def map_importacao_page(raw: Any) -> ImportJobPage:
    record = as_record(raw)
    raw_items = _cased(record, "items")
    items: List[ImportJob] = []
    if isinstance(raw_items, list):
        items = [job for job in map(map_importacao, raw_items) if job.id]

    return ImportJobPage(
        items=tuple(items),
        page=_to_int(_cased(record, "page"), 1),
        page_size=_to_int(_cased(record, "pageSize"), 10),
        total_items=_to_int(_cased(record, "totalItems"), len(items)),
        total_pages=max(1, _to_int(_cased(record, "totalPages"), 1)),
    )


def map_created_id(raw: Any) -> str:
    return str(_cased(as_record(raw), "importacaoId") or "")


def map_excel_analise(raw: Any) -> ExcelAnalise:
    record = as_record(raw)
    summary = as_record(_cased(record, "summary"))
    raw_errors = _cased(record, "errors")
    raw_warnings = _cased(record, "warnings")

    errors = []
    for raw_error in raw_errors if isinstance(raw_errors, list) else []:
        error = as_record(raw_error)
        errors.append(
            ExcelAnaliseErro(
                line_number=_to_int(_cased(error, "lineNumber"), 0),
                column=_optional_str(error, "column"),
                code=str(_cased(error, "code") or ""),
                message=str(_cased(error, "message") or ""),
                value=_optional_str(error, "value"),
            )
        )

    warnings = []
    for raw_warning in raw_warnings if isinstance(raw_warnings, list) else []:
        warning = as_record(raw_warning)
        line = _cased(warning, "lineNumber")
        warnings.append(
            ExcelAnaliseAviso(
                line_number=_to_int(line, 0) if line is not None else None,
                code=str(_cased(warning, "code") or ""),
                message=str(_cased(warning, "message") or ""),
            )
        )

    return ExcelAnalise(
        analysis_id=str(_cased(record, "analysisId") or ""),
        file_name=str(_cased(record, "fileName") or ""),
        status=str(_cased(record, "status") or "INVALIDA"),
        can_import=bool(_cased(record, "canImport")),
        summary=ExcelAnaliseResumo(
            total_linhas=_to_int(_cased(summary, "totalLinhas")),
            linhas_validas=_to_int(_cased(summary, "linhasValidas")),
            linhas_com_erro=_to_int(_cased(summary, "linhasComErro")),
            avisos=_to_int(_cased(summary, "avisos")),
            duplicados_ignorados=_to_int(_cased(summary, "duplicadosIgnorados")),
        ),
        errors=tuple(errors),
        warnings=tuple(warnings),
        fidc_id=_optional_str(record, "fidcId"),
        cedente_id=_optional_str(record, "cedenteId"),
        modalidade=_optional_str(record, "modalidade"),
        created_at=_to_datetime(_cased(record, "createdAt")),
        expires_at=_to_datetime(_cased(record, "expiresAt")),
    )
