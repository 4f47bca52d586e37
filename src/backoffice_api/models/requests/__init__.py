"""
Request models module.
"""

from backoffice_api.models.requests.importacao_requests import (
    EmpresaSubscriptionRequest,
    ExcelConfirmRequest,
    ReprocessRequest,
)

__all__ = [
    "EmpresaSubscriptionRequest",
    "ExcelConfirmRequest",
    "ReprocessRequest",
]
