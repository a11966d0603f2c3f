"""
Pydantic models for PCL layout configuration.
"""

from pydantic import BaseModel, ConfigDict, Field


class PrintConfiguration(BaseModel):
    """
    Layout parameters used for one batch.

    paper_format and envelope_type are free-form tags. They are only compared
    by string equality ("Janela" selects the windowed-envelope placement) and
    unrecognized values are passed through as-is.

    Margins are expressed in the units the PCL commands take directly
    (lines for the top margin, columns for the left margin).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    paper_format: str = Field(default="A4", alias="formatoImpressao")
    envelope_type: str = Field(default="Janela", alias="tipoEnvelope")
    full_address: bool = Field(default=True, alias="enderecoCompleto")
    postal_code: bool = Field(default=True, alias="codigoPostal")
    company_logo: str = Field(default="", alias="logotipoEmpresa")
    margin_top: int = Field(default=15, ge=0, alias="margemSuperior")
    margin_bottom: int = Field(default=15, ge=0, alias="margemInferior")
    margin_left: int = Field(default=20, ge=0, alias="margemEsquerda")
    margin_right: int = Field(default=20, ge=0, alias="margemDireita")


class SourceDescriptor(BaseModel):
    """Where a source data file lives. Used for naming only."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    bucket: str
    key: str
