"""
Import job controller handling HTTP requests/responses only.
"""

from typing import List, Optional

from fastapi import APIRouter, File, Form, Header, Query, Request, UploadFile, status

from backoffice_api.exceptions import ConsoleNotReadyError
from backoffice_api.models.requests import (
    EmpresaSubscriptionRequest,
    ExcelConfirmRequest,
    ReprocessRequest,
)
from backoffice_api.models.responses import (
    ExcelAnaliseResponse,
    ImportacaoCreatedResponse,
    ImportacaoDetailResponse,
    ImportJobPageResponse,
    ImportJobResponse,
    LiveUpdatesStatusResponse,
    NotificationResponse,
    PollerStatusResponse,
    ReprocessResponse,
)
from backoffice_api.utils.error_utils import error_response, not_found_response
from importacoes.console import ImportacaoConsole
from importacoes.exceptions import IngestionApiError
from importacoes.infrastructure import EMPRESA_HEADER
from importacoes.models import ImportJobPage, SelectedFile, SubmissionForm
from importacoes.services.reprocess_service import REPROCESS_REQUESTED_MESSAGE
from importacoes.services.submission_service import SUBMITTED_MESSAGE

router = APIRouter(
    prefix="/importacoes",
    tags=["importacoes"],
)

AUTH_RESPONSES = {
    401: {"description": "Authentication failed - Invalid or missing X-API-Token header"},
    503: {"description": "Service unavailable - API token not configured"},
}


def get_console(request: Request) -> ImportacaoConsole:
    console = getattr(request.app.state, "console", None)
    if console is None:
        raise ConsoleNotReadyError()
    return console


def _page_response(console: ImportacaoConsole) -> ImportJobPageResponse:
    view = console.list_view
    snapshot = view.snapshot or ImportJobPage(
        items=(), page=view.page, page_size=view.page_size
    )
    return ImportJobPageResponse.from_page(
        snapshot, view.poller_state.value, error=view.last_error
    )


async def _read_selected_file(arquivo: Optional[UploadFile]) -> Optional[SelectedFile]:
    if arquivo is None or not arquivo.filename:
        return None
    return SelectedFile(
        file_name=arquivo.filename,
        content=await arquivo.read(),
        content_type=arquivo.content_type or "application/octet-stream",
    )


@router.get(
    "",
    response_model=ImportJobPageResponse,
    summary="List import jobs",
    description="Fetch one page of import jobs. A page with unfinished jobs starts the status poller; a page with none stops it.",
    responses=AUTH_RESPONSES,
)
async def list_importacoes(
    request: Request,
    page: Optional[int] = Query(None, ge=1, description="Page number"),
    page_size: Optional[int] = Query(None, ge=1, alias="pageSize"),
):
    console = get_console(request)
    await console.list_view.load(page=page, page_size=page_size)
    return _page_response(console)


@router.post(
    "/refresh",
    response_model=ImportJobPageResponse,
    summary="Refresh the current page",
    responses=AUTH_RESPONSES,
)
async def refresh_importacoes(request: Request):
    console = get_console(request)
    await console.list_view.refresh()
    return _page_response(console)


@router.post(
    "",
    response_model=ImportacaoCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a file for import",
    description="Validate, fingerprint and upload a CNAB, XML or ZIP file. Excel files must go through /importacoes/analises.",
    responses={
        **AUTH_RESPONSES,
        400: {"description": "Missing file, missing fidcId or invalid file"},
        409: {"description": "An empresa context must be chosen"},
        502: {"description": "Ingestion API rejected or failed the request"},
    },
)
async def submit_importacao(
    request: Request,
    arquivo: Optional[UploadFile] = File(None),
    fidc_id: Optional[str] = Form(None, alias="fidcId"),
    origem: Optional[str] = Form(None),
    tipo_banco: Optional[str] = Form(None, alias="tipoBanco"),
    tipo_cnab: Optional[str] = Form(None, alias="tipoCnab"),
    modalidade: Optional[str] = Form(None),
    cedente_id: Optional[str] = Form(None, alias="cedenteId"),
    empresa_id: Optional[str] = Header(None, alias=EMPRESA_HEADER),
):
    console = get_console(request)
    form = SubmissionForm(
        fidc_id=fidc_id,
        origem=origem,
        file=await _read_selected_file(arquivo),
        tipo_banco=tipo_banco,
        tipo_cnab=tipo_cnab,
        modalidade=modalidade,
        cedente_id=cedente_id,
        empresa_id=empresa_id,
    )
    importacao_id = await console.submission.submit(form)
    return ImportacaoCreatedResponse(
        importacao_id=importacao_id, message=SUBMITTED_MESSAGE
    )


@router.post(
    "/analises",
    response_model=ExcelAnaliseResponse,
    summary="Analyze an Excel file before importing it",
    responses={
        **AUTH_RESPONSES,
        400: {"description": "Missing file, missing fidcId or not an Excel file"},
        502: {"description": "Ingestion API rejected or failed the request"},
    },
)
async def analyze_excel(
    request: Request,
    arquivo: Optional[UploadFile] = File(None),
    fidc_id: Optional[str] = Form(None, alias="fidcId"),
    origem: Optional[str] = Form(None),
    modalidade: Optional[str] = Form(None),
    cedente_id: Optional[str] = Form(None, alias="cedenteId"),
    empresa_id: Optional[str] = Header(None, alias=EMPRESA_HEADER),
):
    console = get_console(request)
    form = SubmissionForm(
        fidc_id=fidc_id,
        origem=origem,
        file=await _read_selected_file(arquivo),
        modalidade=modalidade,
        cedente_id=cedente_id,
        empresa_id=empresa_id,
    )
    analise = await console.submission.analyze_excel(form)
    return ExcelAnaliseResponse.from_analise(analise)


@router.post(
    "/analises/{analysis_id}/confirmar",
    response_model=ImportacaoCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Confirm an analysed Excel file",
    responses={
        **AUTH_RESPONSES,
        409: {"description": "An empresa context must be chosen"},
        502: {"description": "Ingestion API rejected or failed the request"},
    },
)
async def confirm_excel(
    analysis_id: str,
    request: Request,
    body: Optional[ExcelConfirmRequest] = None,
):
    console = get_console(request)
    body = body or ExcelConfirmRequest()
    importacao_id = await console.submission.confirm_excel(
        SubmissionForm(empresa_id=body.empresa_id),
        analysis_id,
        force_warnings=body.force_warnings,
    )
    return ImportacaoCreatedResponse(
        importacao_id=importacao_id, message=SUBMITTED_MESSAGE
    )


@router.get(
    "/poller",
    response_model=PollerStatusResponse,
    summary="Status poller state",
    responses=AUTH_RESPONSES,
)
async def poller_status(request: Request):
    console = get_console(request)
    poller = console.list_view.poller
    return PollerStatusResponse(
        state=poller.state.value, interval_seconds=poller.interval_seconds
    )


@router.get(
    "/notificacoes",
    response_model=List[NotificationResponse],
    summary="Drain pending notifications",
    responses=AUTH_RESPONSES,
)
async def drain_notifications(request: Request):
    console = get_console(request)
    return [
        NotificationResponse.from_notification(notification)
        for notification in console.notifier.drain()
    ]


def _live_updates_response(console: ImportacaoConsole) -> LiveUpdatesStatusResponse:
    live_updates = console.live_updates
    return LiveUpdatesStatusResponse(
        status=live_updates.status.value, empresa_ids=live_updates.empresa_ids
    )


@router.get(
    "/tempo-real",
    response_model=LiveUpdatesStatusResponse,
    summary="Live update connection state",
    responses=AUTH_RESPONSES,
)
async def live_updates_status(request: Request):
    return _live_updates_response(get_console(request))


@router.put(
    "/tempo-real/empresas",
    response_model=LiveUpdatesStatusResponse,
    summary="Choose the empresas whose job changes are pushed live",
    responses=AUTH_RESPONSES,
)
async def subscribe_empresas(request: Request, body: EmpresaSubscriptionRequest):
    console = get_console(request)
    await console.live_updates.subscribe(body.empresa_ids)
    return _live_updates_response(console)


@router.get(
    "/{importacao_id}",
    response_model=ImportacaoDetailResponse,
    summary="Import job detail with its event log",
    responses={
        **AUTH_RESPONSES,
        404: {"description": "Import job not found"},
        502: {"description": "Ingestion API failed the request"},
    },
)
async def get_importacao(importacao_id: str, request: Request):
    console = get_console(request)
    result = await console.detail_view.open(importacao_id)
    if result.not_found:
        return not_found_response(importacao_id, "Importação não encontrada.")
    if result.job is None:
        return error_response(IngestionApiError(message=result.error))
    return ImportacaoDetailResponse.from_result(result)


@router.post(
    "/{importacao_id}/reprocessar",
    response_model=ReprocessResponse,
    summary="Reprocess an import job",
    description="Request a new attempt. Each call is a new attempt on the server.",
    responses={
        **AUTH_RESPONSES,
        409: {"description": "Job still processing and force was not set"},
        502: {"description": "Ingestion API rejected or failed the request"},
    },
)
async def reprocess_importacao(
    importacao_id: str,
    request: Request,
    body: Optional[ReprocessRequest] = None,
):
    console = get_console(request)
    body = body or ReprocessRequest()
    await console.reprocess.reprocess(
        importacao_id, current_status=body.current_status, force=body.force
    )

    job = None
    detail = console.detail_view.current
    if detail is not None and detail.importacao_id == importacao_id and detail.job:
        job = ImportJobResponse.from_job(detail.job)
    return ReprocessResponse(
        importacao_id=importacao_id, message=REPROCESS_REQUESTED_MESSAGE, job=job
    )
