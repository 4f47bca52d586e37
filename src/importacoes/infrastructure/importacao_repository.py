"""
HTTP client for the ingestion API import job resource.

Every call returns fresh immutable snapshots; nothing here caches state
between calls.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from importacoes.config import IngestionApiConfig, config
from importacoes.exceptions import (
    EmpresaChoiceRequiredError,
    IngestionApiError,
    ImportacaoNotFoundError,
)
from importacoes.infrastructure.payload import (
    extract_error_message,
    map_created_id,
    map_excel_analise,
    map_importacao,
    map_importacao_page,
    unwrap_envelope,
)
from importacoes.models import ExcelAnalise, ImportacaoUpload, ImportJob, ImportJobPage
from importacoes.observability import record_repository_operation

EMPRESA_HEADER = "X-Contexto-Empresa-Id"
EMPRESA_CHOICE_MARKER = "mais de uma empresa"


class ImportacaoRepository:
    """
    Thin async client over the ``/operacoes/importacoes`` endpoints.

    Responsibilities:
    - Build requests (query params, multipart bodies, empresa header)
    - Unwrap response envelopes and normalize payloads into models
    - Translate failures into IngestionApiError and its subclasses
    """

    def __init__(
        self,
        api_config: Optional[IngestionApiConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = api_config or config.ingestion_api
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self._config.token:
                headers["Authorization"] = f"Bearer {self._config.token}"
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "ImportacaoRepository":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _path(self, suffix: str = "") -> str:
        return f"{self._config.importacoes_path.rstrip('/')}{suffix}"

    async def list(self, page: int, page_size: int) -> ImportJobPage:
        """Fetch one page of import jobs."""
        payload = await self._request(
            "list",
            "GET",
            self._path(),
            params={"page": page, "pageSize": page_size},
        )
        result = map_importacao_page(payload)
        logger.debug(
            f"Listed {len(result.items)} importacoes "
            f"(page {result.page}/{result.total_pages})"
        )
        return result

    async def create(
        self, upload: ImportacaoUpload, empresa_id: Optional[str] = None
    ) -> str:
        """Submit a file for ingestion. Returns the new importacao id."""
        payload = await self._request(
            "create",
            "POST",
            self._path(),
            data=upload.form_fields(),
            files={
                "arquivo": (upload.file_name, upload.content, upload.content_type)
            },
            empresa_id=empresa_id,
        )
        importacao_id = map_created_id(payload)
        if not importacao_id:
            record_repository_operation("create", "failed")
            raise IngestionApiError(
                details={"reason": "missing importacaoId in response"}
            )
        logger.info(f"Importacao {importacao_id} created for {upload.file_name}")
        return importacao_id

    async def get(self, importacao_id: str) -> ImportJob:
        """Fetch a single job including its events."""
        payload = await self._request(
            "get", "GET", self._path(f"/{importacao_id}"), resource_id=importacao_id
        )
        return map_importacao(payload)

    async def reprocess(self, importacao_id: str) -> None:
        """Ask the API to run a job again."""
        await self._request(
            "reprocess",
            "POST",
            self._path(f"/{importacao_id}/reprocessar"),
            resource_id=importacao_id,
        )
        logger.info(f"Reprocess requested for importacao {importacao_id}")

    async def analyze_excel(
        self, upload: ImportacaoUpload, empresa_id: Optional[str] = None
    ) -> ExcelAnalise:
        """Upload an Excel file for pre-import analysis."""
        payload = await self._request(
            "analyze_excel",
            "POST",
            self._path("/analises"),
            data=upload.form_fields(),
            files={
                "arquivo": (upload.file_name, upload.content, upload.content_type)
            },
            empresa_id=empresa_id,
        )
        return map_excel_analise(payload)

    async def confirm_excel_analysis(
        self,
        analysis_id: str,
        force_warnings: bool = False,
        empresa_id: Optional[str] = None,
    ) -> str:
        """Turn an accepted Excel analysis into an import job. Returns its id."""
        payload = await self._request(
            "confirm_excel",
            "POST",
            self._path(f"/analises/{analysis_id}/confirmar"),
            json={"forceWarnings": force_warnings},
            empresa_id=empresa_id,
            resource_id=analysis_id,
        )
        importacao_id = map_created_id(payload)
        if not importacao_id:
            record_repository_operation("confirm_excel", "failed")
            raise IngestionApiError(
                details={"reason": "missing importacaoId in response"}
            )
        logger.info(f"Excel analysis {analysis_id} confirmed as {importacao_id}")
        return importacao_id

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        empresa_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        headers: Dict[str, str] = {}
        if empresa_id:
            headers[EMPRESA_HEADER] = empresa_id

        client = await self._get_client()
        try:
            response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            record_repository_operation(operation, "failed")
            logger.warning(f"Ingestion API timeout on {operation}: {e}")
            raise IngestionApiError(
                details={"operation": operation, "reason": "timeout"},
                original_exception=e,
            )
        except httpx.HTTPError as e:
            record_repository_operation(operation, "failed")
            logger.error(f"Ingestion API unreachable on {operation}: {e}")
            raise IngestionApiError(
                details={"operation": operation}, original_exception=e
            )

        body = _decode_body(response)

        if response.is_success:
            record_repository_operation(operation, "success")
            return unwrap_envelope(body)

        if response.status_code == 404 and resource_id and operation == "get":
            record_repository_operation(operation, "not_found")
            raise ImportacaoNotFoundError(resource_id)

        message = extract_error_message(body)
        details = {"operation": operation, "status_code": response.status_code}
        record_repository_operation(operation, "failed")
        logger.warning(
            f"Ingestion API {operation} failed with {response.status_code}: {message}"
        )

        if (
            response.status_code == 409
            and EMPRESA_CHOICE_MARKER in message.lower()
        ):
            raise EmpresaChoiceRequiredError(message=message, details=details)

        raise IngestionApiError(
            message=message, status_code=response.status_code, details=details
        )


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        logger.debug(
            f"Non-JSON body from ingestion API ({response.status_code}): "
            f"{response.text[:200]}"
        )
        return None
