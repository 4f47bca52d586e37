"""
Tests for the submission controller.
"""

import hashlib
from dataclasses import dataclass

import pytest

from importacoes.config import UploadConfig
from importacoes.exceptions import (
    IngestionApiError,
    SubmissionValidationError,
)
from importacoes.models import SelectedFile, SubmissionForm
from importacoes.services import SubmissionController, fingerprint
from importacoes.views import NotificationLevel

from conftest import parse_multipart

CNAB_CONTENT = b"01REMESSA01COBRANCA\n1DETALHE\n9TRAILER\n"


@dataclass(frozen=True)
class ChangingFile(SelectedFile):
    """A selected file whose content changes on every read."""

    def read_bytes(self) -> bytes:
        reads = self.__dict__.get("reads", 0) + 1
        object.__setattr__(self, "reads", reads)
        return f"version-{reads}".encode()

    @property
    def size(self) -> int:
        return 9


def cnab_form(**overrides):
    values = dict(
        fidc_id="F1",
        origem="Cnab",
        file=SelectedFile(file_name="lote.rem", content=CNAB_CONTENT),
    )
    values.update(overrides)
    return SubmissionForm(**values)


@pytest.fixture
def controller(repository, notifier):
    return SubmissionController(repository, notifier)


class TestSubmit:
    """Test successful submissions."""

    @pytest.mark.asyncio
    async def test_creates_processing_job(self, fake_server, repository, controller):
        """Submitting lote.rem creates a PROCESSANDO job with one event."""
        importacao_id = await controller.submit(cnab_form())

        job = await repository.get(importacao_id)
        assert job.status == "PROCESSANDO"
        assert job.tentativas == 0
        assert [event.status for event in job.events] == ["PROCESSANDO"]
        assert job.completed_at is None
        await repository.close()

    @pytest.mark.asyncio
    async def test_sends_hash_and_inferred_type(self, fake_server, controller):
        await controller.submit(cnab_form())

        fields, files = parse_multipart(fake_server.requests[-1].content)
        assert fields["fileHash"] == fingerprint(CNAB_CONTENT)
        assert fields["tipoArquivo"] == "CNAB"
        assert fields["origem"] == "Cnab"
        assert files["arquivo"][0] == "lote.rem"

    @pytest.mark.asyncio
    async def test_clears_only_file_selection(self, controller):
        form = cnab_form(modalidade="DUPLICATA")

        await controller.submit(form)

        assert form.file is None
        assert form.fidc_id == "F1"
        assert form.modalidade == "DUPLICATA"

    @pytest.mark.asyncio
    async def test_notifies_success(self, controller, notifier):
        await controller.submit(cnab_form())

        levels = [notification.level for notification in notifier.drain()]
        assert levels == [NotificationLevel.SUCCESS]

    @pytest.mark.asyncio
    async def test_reads_file_from_disk(self, tmp_path, fake_server, controller):
        path = tmp_path / "notas.xml"
        path.write_bytes(b"<nfe/>")

        await controller.submit(cnab_form(file=SelectedFile.from_path(path)))

        fields, files = parse_multipart(fake_server.requests[-1].content)
        assert fields["tipoArquivo"] == "XML"
        assert files["arquivo"] == ("notas.xml", b"<nfe/>")

    @pytest.mark.asyncio
    async def test_hash_matches_uploaded_bytes(self, fake_server, controller):
        selected = ChangingFile(file_name="lote.rem")

        await controller.submit(cnab_form(file=selected))

        fields, files = parse_multipart(fake_server.requests[-1].content)
        uploaded = files["arquivo"][1]
        assert selected.reads == 1
        assert fields["fileHash"] == hashlib.sha256(uploaded).hexdigest()

    @pytest.mark.asyncio
    async def test_hash_failure_submits_without_hash(
        self, monkeypatch, fake_server, controller, notifier
    ):
        def broken(content):
            raise MemoryError("no room to hash")

        monkeypatch.setattr("importacoes.services.fingerprint_service.fingerprint", broken)

        importacao_id = await controller.submit(cnab_form())

        fields, files = parse_multipart(fake_server.requests[-1].content)
        assert importacao_id in fake_server.jobs
        assert "fileHash" not in fields
        assert files["arquivo"][1] == CNAB_CONTENT
        messages = [notification.message for notification in notifier.drain()]
        assert "Falha ao calcular hash do arquivo." in messages

    @pytest.mark.asyncio
    async def test_unreadable_file_blocks_submission(self, tmp_path, fake_server, controller):
        path = tmp_path / "lote.rem"
        path.write_bytes(CNAB_CONTENT)
        form = cnab_form(file=SelectedFile.from_path(path))
        controller.validate(form)
        path.unlink()

        with pytest.raises(SubmissionValidationError) as exc_info:
            await controller.submit(form)

        assert "arquivo" in exc_info.value.field_errors
        assert fake_server.requests == []


class TestValidation:
    """Test client-side rejection before any network call."""

    @pytest.mark.asyncio
    async def test_missing_file_makes_no_network_call(self, fake_server, controller):
        with pytest.raises(SubmissionValidationError) as exc_info:
            await controller.submit(cnab_form(file=None))

        assert "arquivo" in exc_info.value.field_errors
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_missing_fidc(self, fake_server, controller):
        with pytest.raises(SubmissionValidationError) as exc_info:
            await controller.submit(cnab_form(fidc_id=""))

        assert set(exc_info.value.field_errors) == {"fidcId"}
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_reports_every_missing_field(self, controller, notifier):
        with pytest.raises(SubmissionValidationError) as exc_info:
            await controller.submit(SubmissionForm())

        assert set(exc_info.value.field_errors) == {"arquivo", "fidcId"}
        assert notifier.pending[-1].level is NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_rejects_unknown_extension(self, fake_server, controller):
        form = cnab_form(file=SelectedFile(file_name="planilha.csv", content=b"a;b"))

        with pytest.raises(SubmissionValidationError):
            await controller.submit(form)
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, fake_server, repository, notifier):
        controller = SubmissionController(
            repository, notifier, upload_config=UploadConfig(max_file_bytes=8)
        )

        with pytest.raises(SubmissionValidationError) as exc_info:
            await controller.submit(cnab_form())

        assert exc_info.value.field_errors["arquivo"] == "Arquivo excede 20MB."
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_keeps_file_on_server_error(self, fake_server, controller):
        fake_server.fail_next(400, {"errors": [{"value": "Arquivo duplicado"}]})
        form = cnab_form()

        with pytest.raises(IngestionApiError):
            await controller.submit(form)

        assert form.file is not None
        assert len(fake_server.jobs) == 0


class TestExcelFlow:
    """Test the analyze then confirm flow for Excel files."""

    @pytest.mark.asyncio
    async def test_excel_goes_through_analysis(self, fake_server, controller):
        form = cnab_form(file=SelectedFile(file_name="carteira.xlsx", content=b"PK"))

        with pytest.raises(SubmissionValidationError):
            await controller.submit(form)
        assert fake_server.requests == []

    @pytest.mark.asyncio
    async def test_analyze_and_confirm(self, fake_server, controller, notifier):
        form = cnab_form(file=SelectedFile(file_name="carteira.xlsx", content=b"PK"))

        analise = await controller.analyze_excel(form)
        importacao_id = await controller.confirm_excel(
            form, analise.analysis_id, force_warnings=True
        )

        fields, _ = parse_multipart(fake_server.requests[0].content)
        assert fields["tipoArquivo"] == "EXCEL"
        assert importacao_id in fake_server.jobs
        assert form.file is None
        levels = [notification.level for notification in notifier.drain()]
        assert levels == [NotificationLevel.WARN, NotificationLevel.SUCCESS]

    @pytest.mark.asyncio
    async def test_confirm_without_forcing_warnings_fails(self, fake_server, controller):
        form = cnab_form(file=SelectedFile(file_name="carteira.xlsx", content=b"PK"))
        analise = await controller.analyze_excel(form)

        with pytest.raises(IngestionApiError) as exc_info:
            await controller.confirm_excel(form, analise.analysis_id)

        assert exc_info.value.message == "Confirme os avisos para importar."
        assert form.file is not None
