"""
Tests for the read-only detail view.
"""

import pytest

from importacoes.models import StatusCategory
from importacoes.views import ImportacaoDetailView, NotificationLevel


@pytest.fixture
def detail_view(repository, notifier):
    return ImportacaoDetailView(repository, notifier)


class TestDetailView:
    """Test job detail fetching."""

    @pytest.mark.asyncio
    async def test_nonexistent_job_is_not_found(self, detail_view, notifier):
        """A missing job yields a not-found result, never an exception."""
        result = await detail_view.open("00000000-0000-0000-0000-000000000000")

        assert result.not_found
        assert result.job is None
        assert result.error is None
        assert result.events == ()
        assert notifier.pending[-1].message == "Importação não encontrada."

    @pytest.mark.asyncio
    async def test_other_errors_are_not_not_found(self, fake_server, detail_view):
        job_id = fake_server.seed()
        fake_server.fail_next(500, {"message": "Erro interno"})

        result = await detail_view.open(job_id)

        assert not result.not_found
        assert result.error == "Erro interno"

    @pytest.mark.asyncio
    async def test_events_in_server_order_with_own_category(
        self, fake_server, detail_view
    ):
        job_id = fake_server.seed("VALIDADO")
        fake_server.advance(job_id, "FINALIZADO_FALHA")

        result = await detail_view.open(job_id)

        assert [event.status for event in result.events] == [
            "PROCESSANDO",
            "VALIDADO",
            "FINALIZADO_FALHA",
        ]
        assert [event.category for event in result.events] == [
            StatusCategory.WARN,
            StatusCategory.WARN,
            StatusCategory.DANGER,
        ]
        timestamps = [event.created_at for event in result.events]
        assert timestamps == sorted(timestamps)
        assert result.job.category is StatusCategory.DANGER

    @pytest.mark.asyncio
    async def test_refresh_never_mutates_previous_snapshot(
        self, fake_server, detail_view
    ):
        job_id = fake_server.seed()
        first = await detail_view.open(job_id)

        fake_server.advance(job_id, "FINALIZADO_SUCESSO")
        second = await detail_view.refresh()

        assert first.job.status == "PROCESSANDO"
        assert len(first.events) == 1
        assert second.job.status == "FINALIZADO_SUCESSO"
        assert detail_view.current is second

    @pytest.mark.asyncio
    async def test_silent_refresh_keeps_snapshot_on_failure(
        self, fake_server, detail_view, notifier
    ):
        job_id = fake_server.seed()
        first = await detail_view.open(job_id)
        notifier.drain()

        fake_server.fail_next(503)
        await detail_view.refresh(silent=True)

        assert detail_view.current is first
        assert notifier.pending == []

    @pytest.mark.asyncio
    async def test_only_reads(self, fake_server, detail_view):
        job_id = fake_server.seed()

        await detail_view.open(job_id)
        await detail_view.refresh()

        assert {request.method for request in fake_server.requests} == {"GET"}

    @pytest.mark.asyncio
    async def test_closed_view_does_not_fetch(self, fake_server, detail_view):
        detail_view.close()

        assert await detail_view.refresh() is None
        assert fake_server.requests == []
        assert not detail_view.is_open
