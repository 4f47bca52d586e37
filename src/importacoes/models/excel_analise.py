"""
Pre-import analysis of Excel files, returned by the ingestion API before an
Excel import can be confirmed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class ExcelAnaliseStatus(Enum):
    VALIDA = "VALIDA"
    INVALIDA = "INVALIDA"
    VALIDA_COM_AVISOS = "VALIDA_COM_AVISOS"


@dataclass(frozen=True)
class ExcelAnaliseErro:
    line_number: int
    code: str
    message: str
    column: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class ExcelAnaliseAviso:
    code: str
    message: str
    line_number: Optional[int] = None


@dataclass(frozen=True)
class ExcelAnaliseResumo:
    total_linhas: int = 0
    linhas_validas: int = 0
    linhas_com_erro: int = 0
    avisos: int = 0
    duplicados_ignorados: int = 0


@dataclass(frozen=True)
class ExcelAnalise:
    analysis_id: str
    file_name: str
    status: str
    can_import: bool
    summary: ExcelAnaliseResumo = field(default_factory=ExcelAnaliseResumo)
    errors: Tuple[ExcelAnaliseErro, ...] = field(default_factory=tuple)
    warnings: Tuple[ExcelAnaliseAviso, ...] = field(default_factory=tuple)
    fidc_id: Optional[str] = None
    cedente_id: Optional[str] = None
    modalidade: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
