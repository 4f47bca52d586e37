"""
HTTP surface for the import job console.
Hosts one console session for the process lifetime.
"""

from backoffice_api.exceptions import ConsoleNotReadyError

__all__ = [
    "ConsoleNotReadyError",
]
