"""
Services for the importacoes console: fingerprinting, submission, polling
and reprocessing.
"""

from importacoes.services.status_poller import PollerState, StatusPoller
from importacoes.services.fingerprint_service import fingerprint, fingerprint_content
from importacoes.services.reprocess_service import ReprocessController
from importacoes.services.submission_service import SubmissionController

__all__ = [
    "PollerState",
    "StatusPoller",
    "fingerprint",
    "fingerprint_content",
    "ReprocessController",
    "SubmissionController",
]
