"""
Paged import job list with its self-managing status poller.
"""

import asyncio
from typing import Optional, Set

from loguru import logger

from importacoes.config import config
from importacoes.exceptions import BaseImportacaoException
from importacoes.infrastructure import ImportacaoRepository
from importacoes.models import ImportJob, ImportJobPage
from importacoes.services.status_poller import PollerState, StatusPoller
from importacoes.views.notifications import Notifier


class ImportacaoListView:
    """
    Owns pagination state, the latest list snapshot and the polling timer.

    Every successful fetch replaces the snapshot wholesale and re-evaluates
    the poller. After close() the view is torn down: the timer and any
    pending live-update refresh are released and responses still in flight
    are discarded.
    """

    def __init__(
        self,
        repository: ImportacaoRepository,
        notifier: Notifier,
        page_size: Optional[int] = None,
        poll_interval_seconds: Optional[float] = None,
        live_refresh_delay: Optional[float] = None,
    ):
        self.repository = repository
        self.notifier = notifier
        self.page = 1
        self.page_size = page_size or config.polling.default_page_size
        self.snapshot: Optional[ImportJobPage] = None
        self.last_error: Optional[str] = None
        self.detail_view = None
        self.poller = StatusPoller(self._on_tick, poll_interval_seconds)
        self.live_refresh_delay = (
            live_refresh_delay
            if live_refresh_delay is not None
            else config.live_updates.coalesce_seconds
        )
        self._pending_refresh: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()
        self._closed = False

    async def __aenter__(self) -> "ImportacaoListView":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def poller_state(self) -> PollerState:
        return self.poller.state

    def attach_detail(self, detail_view) -> None:
        """
        Follow a detail view: it is refreshed silently on every timer tick,
        and polling continues while its open job is unfinished.
        """
        self.detail_view = detail_view
        detail_view.on_change = self.reevaluate

    def reevaluate(self) -> None:
        """Re-apply the polling rule to the current snapshot and open job."""
        if self._closed:
            return
        self.poller.evaluate(self.snapshot, self._open_job())

    async def refresh(self) -> bool:
        """Fetch the current page. Returns False when the fetch failed or was discarded."""
        if self._closed:
            return False

        page, page_size = self.page, self.page_size
        try:
            result = await self.repository.list(page, page_size)
        except BaseImportacaoException as e:
            if self._closed:
                return False
            self.last_error = e.message
            self.notifier.error(e.message)
            return False

        if self._closed:
            logger.debug("Discarding list response received after teardown")
            return False

        self.snapshot = result
        self.last_error = None
        self.poller.evaluate(result, self._open_job())
        return True

    async def load(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> bool:
        """Apply pagination changes, if any, then fetch once."""
        if page_size is not None and page_size != self.page_size:
            self.page_size = max(1, page_size)
            self.page = 1
        if page is not None:
            self.page = max(1, page)
        return await self.refresh()

    async def change_page(self, page: int) -> bool:
        return await self.load(page=page)

    async def change_page_size(self, page_size: int) -> bool:
        self.page_size = max(1, page_size)
        self.page = 1
        return await self.refresh()

    def on_importacao_changed(self, importacao_id: str) -> None:
        """
        Handle a pushed change notification for one job.

        A burst of notifications leads to a single list refresh once the
        coalescing window elapses. When the changed job is the one open in
        the detail view, that view is refreshed silently right away.
        """
        if self._closed or not importacao_id:
            return

        if self._pending_refresh is None:
            self._pending_refresh = self._spawn(self._coalesced_refresh())

        detail = self.detail_view
        if detail is not None and detail.importacao_id == importacao_id:
            self._spawn(detail.refresh(silent=True))

    async def close(self) -> None:
        """Tear the view down; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self.poller.close()

        pending = list(self._background)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("Importacao list view closed")

    def _open_job(self) -> Optional[ImportJob]:
        detail = self.detail_view
        if detail is None or detail.current is None:
            return None
        return detail.current.job

    async def _coalesced_refresh(self) -> None:
        try:
            await asyncio.sleep(self.live_refresh_delay)
        finally:
            self._pending_refresh = None
        await self.refresh()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background_done)
        return task

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Live update refresh failed: {task.exception()}")

    async def _on_tick(self) -> bool:
        refreshed = await self.refresh()
        if self.detail_view is not None and not self._closed:
            await self.detail_view.refresh(silent=True)
        return refreshed
