"""
Reprocess controller for manually retrying import jobs.
"""

from typing import Optional

from loguru import logger

from importacoes.exceptions import BaseImportacaoException, ReprocessNotAllowedError
from importacoes.infrastructure import ImportacaoRepository
from importacoes.logging import clear_importacao_id, set_importacao_id
from importacoes.models import ImportacaoStatus
from importacoes.observability import record_reprocess
from importacoes.views.notifications import Notifier

REPROCESS_REQUESTED_MESSAGE = "Reprocessamento solicitado."


class ReprocessController:
    """Issues the manual retry transition and refreshes the views that show the job."""

    def __init__(
        self,
        repository: ImportacaoRepository,
        notifier: Notifier,
        list_view=None,
        detail_view=None,
    ):
        """
        Initialize reprocess controller.

        Args:
            repository: Ingestion API client
            notifier: Where user-facing outcomes are reported
            list_view: List view refreshed after a successful request
            detail_view: Detail view refreshed when it shows the same job
        """
        self.repository = repository
        self.notifier = notifier
        self.list_view = list_view
        self.detail_view = detail_view

    async def reprocess(
        self,
        importacao_id: str,
        current_status: Optional[str] = None,
        force: bool = False,
    ) -> None:
        """
        Request a new attempt for a job.

        Every successful call is a new attempt on the server; nothing here
        deduplicates repeated calls.

        Args:
            importacao_id: Job to reprocess
            current_status: Status the caller last saw, if known
            force: Skip the client-side check for jobs still processing

        Raises:
            ReprocessNotAllowedError: current_status is non-terminal and force is False
            IngestionApiError: the API refused or failed the request
        """
        set_importacao_id(importacao_id)
        try:
            if (
                current_status is not None
                and not force
                and not ImportacaoStatus.is_terminal(current_status)
            ):
                record_reprocess("refused")
                error = ReprocessNotAllowedError(importacao_id, current_status)
                self.notifier.error(error.message)
                raise error

            try:
                await self.repository.reprocess(importacao_id)
            except BaseImportacaoException as e:
                record_reprocess("failed")
                self.notifier.error(e.message)
                raise

            record_reprocess("success")
            logger.info(
                f"Reprocess accepted (previous status: {current_status or 'unknown'})"
            )
            self.notifier.success(REPROCESS_REQUESTED_MESSAGE)
            await self._refresh_views(importacao_id)
        finally:
            clear_importacao_id()

    async def _refresh_views(self, importacao_id: str) -> None:
        if self.detail_view is not None and self.detail_view.importacao_id == importacao_id:
            await self.detail_view.refresh()
        if self.list_view is not None:
            # Re-evaluates the poller now that the job is non-terminal again
            await self.list_view.refresh()
