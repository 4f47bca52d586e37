"""
Console session wiring the repository, views and controllers together.
"""

from typing import Optional

import httpx
from loguru import logger

from importacoes.config import AppConfig, config
from importacoes.infrastructure import ImportacaoLiveUpdates, ImportacaoRepository
from importacoes.services import ReprocessController, SubmissionController
from importacoes.views import ImportacaoDetailView, ImportacaoListView, Notifier


class ImportacaoConsole:
    """One user session of the import console; close() releases everything it owns."""

    def __init__(
        self,
        app_config: Optional[AppConfig] = None,
        repository: Optional[ImportacaoRepository] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        app_config = app_config or config
        self.repository = repository or ImportacaoRepository(
            app_config.ingestion_api, transport=transport
        )
        self.notifier = Notifier()
        self.list_view = ImportacaoListView(
            self.repository,
            self.notifier,
            page_size=app_config.polling.default_page_size,
            poll_interval_seconds=app_config.polling.interval_seconds,
            live_refresh_delay=app_config.live_updates.coalesce_seconds,
        )
        self.detail_view = ImportacaoDetailView(self.repository, self.notifier)
        self.list_view.attach_detail(self.detail_view)
        self.submission = SubmissionController(
            self.repository,
            self.notifier,
            list_view=self.list_view,
            upload_config=app_config.upload,
        )
        self.reprocess = ReprocessController(
            self.repository,
            self.notifier,
            list_view=self.list_view,
            detail_view=self.detail_view,
        )
        self.live_updates = ImportacaoLiveUpdates(
            app_config.ingestion_api,
            app_config.live_updates,
            on_changed=self.list_view.on_importacao_changed,
            transport=transport,
        )
        self._live_updates_enabled = app_config.live_updates.enabled

    def start_live_updates(self) -> bool:
        """Open the change notification channel when it is enabled."""
        if not self._live_updates_enabled:
            logger.info("Live updates disabled")
            return False
        return self.live_updates.start()

    async def __aenter__(self) -> "ImportacaoConsole":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.live_updates.close()
        await self.list_view.close()
        self.detail_view.close()
        await self.repository.close()
        logger.info("Importacao console closed")
