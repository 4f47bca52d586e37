"""
Response models module - organized by responsibility.
"""

from backoffice_api.models.responses.error_responses import ErrorResponse
from backoffice_api.models.responses.importacao_responses import (
    ExcelAnaliseResponse,
    ImportacaoCreatedResponse,
    ImportacaoDetailResponse,
    ImportEventResponse,
    ImportJobPageResponse,
    ImportJobResponse,
    LiveUpdatesStatusResponse,
    NotificationResponse,
    PollerStatusResponse,
    ReprocessResponse,
)
from backoffice_api.models.responses.system_responses import HealthCheckResponse

__all__ = [
    "ErrorResponse",
    "HealthCheckResponse",
    "ExcelAnaliseResponse",
    "ImportacaoCreatedResponse",
    "ImportacaoDetailResponse",
    "ImportEventResponse",
    "ImportJobPageResponse",
    "ImportJobResponse",
    "LiveUpdatesStatusResponse",
    "NotificationResponse",
    "PollerStatusResponse",
    "ReprocessResponse",
]
