"""
Exception module for the importacoes console.
Contains custom exceptions for different error types.
"""

from importacoes.exceptions.base_exceptions import BaseException as BaseImportacaoException
from importacoes.exceptions.base_exceptions import (
    BusinessException,
    ExceptionCode,
    ExternalServiceException,
    SystemException,
)
from importacoes.exceptions.repository_exceptions import (
    GENERIC_ERROR_MESSAGE,
    EmpresaChoiceRequiredError,
    ImportacaoNotFoundError,
    IngestionApiError,
    LiveUpdatesError,
)
from importacoes.exceptions.submission_exceptions import (
    FingerprintError,
    ReprocessNotAllowedError,
    SubmissionValidationError,
)

__all__ = [
    "BaseImportacaoException",
    "BusinessException",
    "SystemException",
    "ExternalServiceException",
    "ExceptionCode",
    "GENERIC_ERROR_MESSAGE",
    "IngestionApiError",
    "EmpresaChoiceRequiredError",
    "ImportacaoNotFoundError",
    "LiveUpdatesError",
    "SubmissionValidationError",
    "FingerprintError",
    "ReprocessNotAllowedError",
]
