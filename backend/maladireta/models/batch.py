"""
Pydantic models for the batch payload sent by the central orchestrator and
for the processing response returned to it.

Wire names are the orchestrator's camelCase Portuguese keys; Python code uses
the English attribute names. Every payload field is optional at parse time so
that missing data is reported by validate_payload() as a structured
"Erro de Validação" response instead of a framework-level 422.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from maladireta.models.print_config import PrintConfiguration

EXPECTED_PROCESSING_TYPE = "ClienteMalaDireta"

STATUS_SUCCESS = "Sucesso"
STATUS_VALIDATION_ERROR = "Erro de Validação"
STATUS_INTERNAL_ERROR = "Erro Interno"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Customer(_WireModel):
    """Customer that owns the batch."""

    id: int = 0
    name: str = Field(default="", alias="nome")
    email: str = ""
    phone: str = Field(default="", alias="telefone")
    created_at: Optional[datetime] = Field(default=None, alias="dataCadastro")


class ProcessingProfile(_WireModel):
    """Processing profile selected for the customer."""

    id: int = 0
    name: str = Field(default="", alias="nome")
    description: str = Field(default="", alias="descricao")
    configuration_json: Optional[str] = Field(default=None, alias="configuracaoJson")
    logo_path: Optional[str] = Field(default=None, alias="logotipoPath")
    created_at: Optional[datetime] = Field(default=None, alias="dataCriacao")
    processing_type: Optional[str] = Field(default=None, alias="tipoProcessamento")
    lambda_function: Optional[str] = Field(default=None, alias="lambdaFunction")


class BatchFile(_WireModel):
    """One source data file (CSV/TXT) uploaded for the batch."""

    id: int = 0
    batch_id: int = Field(default=0, alias="loteId")
    file_name: str = Field(default="", alias="nomeArquivo")
    storage_key: str = Field(default="", alias="caminhoArquivo")
    size_bytes: int = Field(default=0, alias="tamanhoBytes")
    page_count: int = Field(default=0, alias="numeroPaginas")
    uploaded_at: Optional[datetime] = Field(default=None, alias="dataUpload")


class BatchPayload(_WireModel):
    """Request body for POST /api/lotes/processar."""

    batch_id: int = Field(default=0, alias="loteId")
    customer: Optional[Customer] = Field(default=None, alias="cliente")
    profile: Optional[ProcessingProfile] = Field(default=None, alias="perfilProcessamento")
    files: Optional[List[BatchFile]] = Field(default=None, alias="arquivosPcl")
    created_at: Optional[datetime] = Field(default=None, alias="dataCriacao")
    processing_type: Optional[str] = Field(default=None, alias="tipoProcessamento")
    lambda_arn: Optional[str] = Field(default=None, alias="lambdaArn")
    overrides: Optional[Dict[str, Any]] = Field(default=None, alias="processamentoConfig")


class ProcessedFile(_WireModel):
    """Result of converting and storing one file."""

    file_name: str = Field(alias="nomeArquivo")
    location: str = Field(alias="caminhoS3")
    storage_key: str = Field(alias="chaveS3")
    size_bytes: int = Field(alias="tamanhoProcessado")


class ProcessingDetails(_WireModel):
    """Aggregated result of a successfully processed batch."""

    elapsed_seconds: float = Field(default=0.0, alias="tempoProcessamento")
    processed_files: List[str] = Field(default_factory=list, alias="arquivosProcessados")
    stored_locations: List[str] = Field(default_factory=list, alias="arquivosProcessadosS3")
    total_pages: int = Field(default=0, alias="totalPaginas")
    configuration: Optional[PrintConfiguration] = Field(default=None, alias="configuracaoUtilizada")


class BatchResponse(_WireModel):
    """Response returned to the orchestrator, for success and failure alike."""

    batch_id: int = Field(alias="loteId")
    status: str
    success: bool = Field(alias="sucesso")
    message: str = Field(alias="mensagemRetorno")
    processed_at: datetime = Field(alias="dataProcessamento")
    details: Optional[ProcessingDetails] = Field(default=None, alias="detalhesProcessamento")
    processing_type: Optional[str] = Field(default=None, alias="tipoProcessamento")
    elapsed_seconds: float = Field(default=0.0, alias="tempoProcessamento")
    processed_files: List[str] = Field(default_factory=list, alias="arquivosProcessados")
    total_pages: int = Field(default=0, alias="totalPaginas")
