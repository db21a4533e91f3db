from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from shared.latex.engines import EngineName


class CompileRequest(BaseModel):
    """LaTeX source to compile into a PDF."""

    model_config = ConfigDict(populate_by_name=True)

    latex: str = Field(
        "",
        validation_alias=AliasChoices("latex", "tex"),
        description="Complete LaTeX document",
    )
    engine: Optional[EngineName] = Field(
        None, description="Compiler to try first; inferred from the preamble when omitted"
    )


class EngineAttempt(BaseModel):
    """One attempt against the compilation service."""

    engine: str = Field(..., description="Engine name, or 'tar-bz2' for the archive endpoint")
    status: Optional[int] = Field(None, description="HTTP status returned by the service")
    error: Optional[str] = Field(None, description="Error message or log snippet")


class UploadedSource(BaseModel):
    """A file received by the upload endpoint."""

    filename: str = Field(..., description="Client supplied file name (basename only)")
    content: bytes = Field(..., description="Raw file bytes")


class CompileResult(BaseModel):
    """A compiled PDF and the attempts it took to get it."""

    pdf: bytes = Field(..., description="PDF bytes (start with %PDF)")
    engine: str = Field(..., description="Engine or path that produced the PDF")
    attempts: List[EngineAttempt] = Field(default_factory=list, description="Failed attempts before success")
