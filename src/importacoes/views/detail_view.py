"""
Read-only detail view of one import job and its event log.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from loguru import logger

from importacoes.exceptions import BaseImportacaoException, ImportacaoNotFoundError
from importacoes.infrastructure import ImportacaoRepository
from importacoes.logging import clear_importacao_id, set_importacao_id
from importacoes.models import ImportEvent, ImportJob
from importacoes.views.notifications import Notifier

NOT_FOUND_MESSAGE = "Importação não encontrada."


@dataclass(frozen=True)
class DetailResult:
    """Outcome of a detail fetch; exactly one of job, not_found or error is set."""

    importacao_id: str
    job: Optional[ImportJob] = None
    not_found: bool = False
    error: Optional[str] = None

    @property
    def events(self) -> Tuple[ImportEvent, ...]:
        # Rendered in server order, never re-sorted
        return self.job.events if self.job else ()


class ImportacaoDetailView:
    """Fetches and holds the latest snapshot of one job. No mutation path."""

    def __init__(self, repository: ImportacaoRepository, notifier: Notifier):
        self.repository = repository
        self.notifier = notifier
        self.importacao_id: Optional[str] = None
        self.current: Optional[DetailResult] = None
        # Called whenever the open job or its snapshot changes
        self.on_change: Optional[Callable[[], None]] = None

    @property
    def is_open(self) -> bool:
        return self.importacao_id is not None

    async def open(self, importacao_id: str) -> DetailResult:
        self.importacao_id = importacao_id
        self.current = None
        return await self.refresh()

    def close(self) -> None:
        self.importacao_id = None
        self.current = None
        self._changed()

    async def refresh(self, silent: bool = False) -> Optional[DetailResult]:
        """
        Re-fetch the open job.

        A silent refresh never notifies and keeps the previous snapshot when
        the fetch fails.
        """
        importacao_id = self.importacao_id
        if importacao_id is None:
            return None

        set_importacao_id(importacao_id)
        try:
            result = await self._fetch(importacao_id, silent)
        finally:
            clear_importacao_id()

        # The user may have opened another job while this one was loading
        if self.importacao_id != importacao_id:
            return result
        if silent and result.job is None:
            return result
        self.current = result
        self._changed()
        return result

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    async def _fetch(self, importacao_id: str, silent: bool) -> DetailResult:
        try:
            job = await self.repository.get(importacao_id)
        except ImportacaoNotFoundError:
            logger.info(f"Importacao {importacao_id} not found")
            if not silent:
                self.notifier.error(NOT_FOUND_MESSAGE)
            return DetailResult(importacao_id=importacao_id, not_found=True)
        except BaseImportacaoException as e:
            if not silent:
                self.notifier.error(e.message)
            return DetailResult(importacao_id=importacao_id, error=e.message)

        return DetailResult(importacao_id=importacao_id, job=job)
