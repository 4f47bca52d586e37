"""
Client-side exceptions for submission and reprocess flows.
"""

from typing import Dict

from importacoes.exceptions.base_exceptions import (
    BusinessException,
    ExceptionCode,
    SystemException,
)


class SubmissionValidationError(BusinessException):
    """Raised before any network call when the submission form is incomplete."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            message=" ".join(self.field_errors.values()),
            code=ExceptionCode.VALIDATION_ERROR,
            details={"fields": self.field_errors},
        )


class FingerprintError(SystemException):
    """Raised when the selected file content cannot be hashed."""

    def __init__(self, file_name: str = None, original_exception: Exception = None):
        super().__init__(
            message="Falha ao calcular hash do arquivo.",
            code=ExceptionCode.FILE_READ_ERROR,
            details={"file_name": file_name},
            original_exception=original_exception,
        )


class ReprocessNotAllowedError(BusinessException):
    """Raised when reprocess is requested for a job that is still running."""

    def __init__(self, importacao_id: str, current_status: str):
        self.importacao_id = importacao_id
        self.current_status = current_status
        super().__init__(
            message=(
                f"Importação {importacao_id} ainda está em {current_status}; "
                "aguarde a finalização para reprocessar."
            ),
            code=ExceptionCode.INVALID_STATE,
            details={"importacao_id": importacao_id, "status": current_status},
        )
