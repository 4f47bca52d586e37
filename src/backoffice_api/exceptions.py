"""
API-specific exceptions for the import console surface.
"""

from importacoes.exceptions import BaseImportacaoException, ExceptionCode


class ConsoleNotReadyError(BaseImportacaoException):
    """Raised when a request arrives before the console session is started."""

    def __init__(
        self,
        message: str = "Console session is not available",
        details: dict = None,
    ):
        super().__init__(
            message=message,
            code=ExceptionCode.SERVICE_UNAVAILABLE,
            details=details or {},
        )
