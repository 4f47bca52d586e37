"""
Request bodies for import job commands.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ReprocessRequest(BaseModel):
    """Optional body for a reprocess call."""

    current_status: Optional[str] = Field(
        None, description="Status the caller last saw for the job"
    )
    force: bool = Field(
        False, description="Reprocess even if the job is still processing"
    )

    class Config:
        json_schema_extra = {
            "example": {"current_status": "FINALIZADO_FALHA", "force": False}
        }


class ExcelConfirmRequest(BaseModel):
    force_warnings: bool = Field(
        False, description="Import even though the analysis reported warnings"
    )
    empresa_id: Optional[str] = Field(
        None, description="Empresa context, when the user belongs to more than one"
    )


class EmpresaSubscriptionRequest(BaseModel):
    empresa_ids: List[str] = Field(
        default_factory=list, description="Empresas whose job changes are pushed live"
    )
