"""
Client-side submission state: the selected file and the form metadata.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from importacoes.models.importacao import TipoArquivo


@dataclass(frozen=True)
class SelectedFile:
    """A file picked for upload, either already in memory or on disk."""

    file_name: str
    content: Optional[bytes] = None
    path: Optional[Path] = None
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path, content_type: str = "application/octet-stream"):
        path = Path(path)
        return cls(file_name=path.name, path=path, content_type=content_type)

    @property
    def extension(self) -> str:
        dot = self.file_name.rfind(".")
        return self.file_name[dot:].lower() if dot >= 0 else ""

    @property
    def tipo_arquivo(self) -> TipoArquivo:
        return TipoArquivo.from_file_name(self.file_name)

    @property
    def size(self) -> int:
        if self.content is not None:
            return len(self.content)
        if self.path is None:
            raise FileNotFoundError(self.file_name)
        return self.path.stat().st_size

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise FileNotFoundError(self.file_name)
        return self.path.read_bytes()


@dataclass
class SubmissionForm:
    """Mutable form state; only the file selection is cleared after a submit."""

    fidc_id: Optional[str] = None
    origem: Optional[str] = None
    file: Optional[SelectedFile] = None
    tipo_banco: Optional[str] = None
    tipo_cnab: Optional[str] = None
    modalidade: Optional[str] = None
    cedente_id: Optional[str] = None
    empresa_id: Optional[str] = None

    def clear_file(self) -> None:
        self.file = None


@dataclass(frozen=True)
class ImportacaoUpload:
    """Everything the create call sends as multipart form data."""

    file_name: str
    content: bytes
    fidc_id: str
    tipo_arquivo: str
    content_type: str = "application/octet-stream"
    origem: Optional[str] = None
    file_hash: Optional[str] = None
    tipo_banco: Optional[str] = None
    tipo_cnab: Optional[str] = None
    modalidade: Optional[str] = None
    cedente_id: Optional[str] = None

    def form_fields(self) -> Dict[str, str]:
        """Non-file multipart fields, omitting unset optional values."""
        fields = {
            "fidcId": self.fidc_id,
            "tipoArquivo": self.tipo_arquivo,
            "origem": self.origem,
            "modalidade": self.modalidade,
            "cedenteId": self.cedente_id,
            "fileHash": self.file_hash,
        }
        if self.tipo_arquivo == TipoArquivo.CNAB.value:
            fields["tipoBanco"] = self.tipo_banco
            fields["tipoCnab"] = self.tipo_cnab
        return {key: value for key, value in fields.items() if value}
