"""
Submission controller: validates the form, fingerprints the file and
creates the import job on the ingestion API.
"""

import asyncio
from typing import Dict, Optional

from loguru import logger

from importacoes.config import UploadConfig, config
from importacoes.exceptions import (
    BaseImportacaoException,
    FingerprintError,
    SubmissionValidationError,
)
from importacoes.infrastructure import ImportacaoRepository
from importacoes.logging import clear_importacao_id, set_importacao_id
from importacoes.models import (
    ExcelAnalise,
    ImportacaoUpload,
    SubmissionForm,
    TipoArquivo,
)
from importacoes.observability import record_submission
from importacoes.services.fingerprint_service import fingerprint_content
from importacoes.views.notifications import Notifier

SUBMITTED_MESSAGE = "Importação enviada para processamento."


class SubmissionController:
    """
    Turns a filled SubmissionForm into a remote import job.

    No local job record is ever created: the returned id is the only trace,
    and the list view picks the job up on its next fetch.
    """

    def __init__(
        self,
        repository: ImportacaoRepository,
        notifier: Notifier,
        list_view=None,
        upload_config: Optional[UploadConfig] = None,
    ):
        self.repository = repository
        self.notifier = notifier
        self.list_view = list_view
        self.upload_config = upload_config or config.upload

    def validate(self, form: SubmissionForm) -> None:
        """
        Client-side checks that run before any network call.

        Raises:
            SubmissionValidationError: with a message per offending field
        """
        errors: Dict[str, str] = {}

        selected = form.file
        if selected is None:
            errors["arquivo"] = "Selecione um arquivo válido para enviar."
        elif selected.extension not in self.upload_config.accepted_extensions:
            errors["arquivo"] = (
                "Extensão inválida. Use .rem, .txt, .cnab, .xml, .zip ou .xlsx."
            )
        else:
            try:
                size = selected.size
            except OSError:
                errors["arquivo"] = "Não foi possível ler o arquivo selecionado."
            else:
                if size > self.upload_config.max_file_bytes:
                    errors["arquivo"] = "Arquivo excede 20MB."

        if not form.fidc_id:
            errors["fidcId"] = "Informe o FIDC de destino."

        if errors:
            raise SubmissionValidationError(errors)

    async def submit(self, form: SubmissionForm) -> str:
        """
        Create an import job from the form. Returns the new importacao id.

        Excel files are rejected here; they go through analyze_excel and
        confirm_excel instead.
        """
        try:
            self.validate(form)
            if form.file.tipo_arquivo is TipoArquivo.EXCEL:
                raise SubmissionValidationError(
                    {"arquivo": "Arquivos Excel precisam ser analisados antes do envio."}
                )
            upload = await self._build_upload(form)
            importacao_id = await self.repository.create(
                upload, empresa_id=form.empresa_id
            )
        except SubmissionValidationError as e:
            record_submission("rejected")
            self.notifier.error(e.message)
            raise
        except BaseImportacaoException as e:
            record_submission("failed")
            self.notifier.error(e.message)
            raise

        set_importacao_id(importacao_id)
        try:
            record_submission("accepted")
            logger.info(f"Submitted {upload.file_name} as {upload.tipo_arquivo}")
            self.notifier.success(SUBMITTED_MESSAGE)
            form.clear_file()
            await self._refresh_list()
        finally:
            clear_importacao_id()
        return importacao_id

    async def analyze_excel(self, form: SubmissionForm) -> ExcelAnalise:
        """Send an Excel file for pre-import analysis."""
        try:
            self.validate(form)
            if form.file.tipo_arquivo is not TipoArquivo.EXCEL:
                raise SubmissionValidationError(
                    {"arquivo": "A análise prévia é exclusiva para arquivos Excel."}
                )
            upload = await self._build_upload(form)
            analysis = await self.repository.analyze_excel(
                upload, empresa_id=form.empresa_id
            )
        except SubmissionValidationError as e:
            record_submission("rejected")
            self.notifier.error(e.message)
            raise
        except BaseImportacaoException as e:
            record_submission("failed")
            self.notifier.error(e.message)
            raise

        if not analysis.can_import:
            self.notifier.error(
                f"Arquivo com {len(analysis.errors)} erro(s). "
                "Corrija e envie novamente."
            )
        elif analysis.warnings:
            self.notifier.warn("Análise concluída com avisos. Revise antes de confirmar.")
        else:
            self.notifier.success("Análise concluída sem erros.")
        return analysis

    async def confirm_excel(
        self,
        form: SubmissionForm,
        analysis_id: str,
        force_warnings: bool = False,
    ) -> str:
        """Confirm an analysed Excel file. Returns the new importacao id."""
        try:
            importacao_id = await self.repository.confirm_excel_analysis(
                analysis_id,
                force_warnings=force_warnings,
                empresa_id=form.empresa_id,
            )
        except BaseImportacaoException as e:
            record_submission("failed")
            self.notifier.error(e.message)
            raise

        set_importacao_id(importacao_id)
        try:
            record_submission("accepted")
            self.notifier.success(SUBMITTED_MESSAGE)
            form.clear_file()
            await self._refresh_list()
        finally:
            clear_importacao_id()
        return importacao_id

    async def _build_upload(self, form: SubmissionForm) -> ImportacaoUpload:
        selected = form.file
        try:
            content = await asyncio.to_thread(selected.read_bytes)
        except OSError as e:
            logger.warning(f"Could not read {selected.file_name}: {e}")
            raise SubmissionValidationError(
                {"arquivo": "Não foi possível ler o arquivo selecionado."}
            )

        file_hash = None
        try:
            file_hash = await fingerprint_content(content, selected.file_name)
        except FingerprintError as e:
            # Hash is only a traceability aid; submit without it
            self.notifier.error(e.message)

        return ImportacaoUpload(
            file_name=selected.file_name,
            content=content,
            fidc_id=form.fidc_id,
            tipo_arquivo=selected.tipo_arquivo.value,
            content_type=selected.content_type,
            origem=form.origem,
            file_hash=file_hash,
            tipo_banco=form.tipo_banco,
            tipo_cnab=form.tipo_cnab,
            modalidade=form.modalidade,
            cedente_id=form.cedente_id,
        )

    async def _refresh_list(self) -> None:
        if self.list_view is not None:
            await self.list_view.refresh()
