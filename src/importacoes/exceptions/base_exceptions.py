"""
Base exception classes for the importacoes console.
"""

from enum import Enum
from typing import Optional


class ExceptionCode(Enum):
    """Enumeration of all possible exception codes."""

    # Infrastructure errors (INFRA_XXXX)
    SERVICE_UNAVAILABLE = "INFRA_1003"

    # Business rule errors (BIZ_XXXX)
    VALIDATION_ERROR = "BIZ_2003"
    DATA_NOT_FOUND = "BIZ_2004"
    INVALID_STATE = "BIZ_2007"
    EMPRESA_CHOICE_REQUIRED = "BIZ_2011"

    # System errors (SYS_XXXX)
    FILE_READ_ERROR = "SYS_4006"

    # External service errors (EXT_XXXX)
    EXTERNAL_API_ERROR = "EXT_5001"
    EXTERNAL_SERVICE_UNAVAILABLE = "EXT_5003"


class BaseException(Exception):
    """Base exception for the importacoes console."""

    def __init__(
        self,
        message: str,
        code: ExceptionCode,
        details: Optional[dict] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code.value
        self.details = details or {}
        self.original_exception = original_exception

    def __str__(self):
        return f"[{self.code}] {self.message}"

    def to_dict(self):
        """Convert exception to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "original_exception_type": (
                type(self.original_exception).__name__
                if self.original_exception
                else None
            ),
        }


class BusinessException(BaseException):
    """Base exception for business rule violations."""

    pass


class SystemException(BaseException):
    """Base exception for system-level errors."""

    pass


class ExternalServiceException(BaseException):
    """Base exception for external service-related errors."""

    pass
