"""
Exceptions raised by the ingestion API repository client.
"""

from typing import Optional

from importacoes.exceptions.base_exceptions import (
    BusinessException,
    ExceptionCode,
    ExternalServiceException,
)

GENERIC_ERROR_MESSAGE = "Não foi possível concluir a operação."


class IngestionApiError(ExternalServiceException):
    """Raised when the ingestion API fails or reports an error.

    ``message`` is already the user-facing text extracted from the payload.
    """

    def __init__(
        self,
        message: str = GENERIC_ERROR_MESSAGE,
        status_code: Optional[int] = None,
        details: dict = None,
        original_exception: Exception = None,
    ):
        exception_details = details or {}
        exception_details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(
            message=message,
            code=(
                ExceptionCode.EXTERNAL_SERVICE_UNAVAILABLE
                if status_code is None
                else ExceptionCode.EXTERNAL_API_ERROR
            ),
            details=exception_details,
            original_exception=original_exception,
        )


class EmpresaChoiceRequiredError(IngestionApiError):
    """Raised when the API needs an explicit empresa context for the request."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=409, details=details)
        self.code = ExceptionCode.EMPRESA_CHOICE_REQUIRED.value


class ImportacaoNotFoundError(BusinessException):
    """Raised when an import job id does not resolve on the ingestion API."""

    def __init__(self, importacao_id: str):
        self.importacao_id = importacao_id
        super().__init__(
            message=f"Importação não encontrada: {importacao_id}",
            code=ExceptionCode.DATA_NOT_FOUND,
            details={"importacao_id": importacao_id},
        )


class LiveUpdatesError(ExternalServiceException):
    """Raised when the change notification hub refuses the connection."""

    def __init__(self, message: str, original_exception: Exception = None):
        super().__init__(
            message=message,
            code=ExceptionCode.EXTERNAL_SERVICE_UNAVAILABLE,
            original_exception=original_exception,
        )
