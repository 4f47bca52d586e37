"""
Mapping of console exceptions to HTTP error responses.
"""

from fastapi import status
from fastapi.responses import JSONResponse

from backoffice_api.exceptions import ConsoleNotReadyError
from backoffice_api.models.responses import ErrorResponse
from importacoes.exceptions import (
    BaseImportacaoException,
    EmpresaChoiceRequiredError,
    ImportacaoNotFoundError,
    IngestionApiError,
    ReprocessNotAllowedError,
    SubmissionValidationError,
)


def status_code_for(exc: BaseImportacaoException) -> int:
    if isinstance(exc, SubmissionValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ImportacaoNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (ReprocessNotAllowedError, EmpresaChoiceRequiredError)):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, IngestionApiError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, ConsoleNotReadyError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: BaseImportacaoException) -> JSONResponse:
    """Build the JSON error response for a console exception."""
    details = dict(exc.details)
    details["code"] = exc.code
    error = ErrorResponse(
        error=type(exc).__name__, message=exc.message, details=details
    )
    return JSONResponse(
        status_code=status_code_for(exc),
        content=error.model_dump(mode="json"),
    )


def not_found_response(importacao_id: str, message: str) -> JSONResponse:
    error = ErrorResponse(
        error="ImportacaoNotFound",
        message=message,
        details={"importacao_id": importacao_id},
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error.model_dump(mode="json"),
    )
