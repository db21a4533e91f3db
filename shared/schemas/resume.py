from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TailorRequest(BaseModel):
    """Request to tailor a LaTeX resume for a job description."""

    model_config = ConfigDict(populate_by_name=True)

    job_description: str = Field(
        "",
        validation_alias=AliasChoices("jobDescription", "job_description", "jd"),
        description="Target job description (at least 16 characters)",
    )
    base_resume: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("baseResume", "base_resume", "baseTex"),
        description="LaTeX resume source; the bundled template is used when omitted",
    )
    api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("apiKey", "api_key"),
        description="Gemini API key; falls back to the server key",
        repr=False,
    )
    model: Optional[str] = Field(None, description="Preferred Gemini model identifier")


class TailorResult(BaseModel):
    """Tailored LaTeX document."""

    latex: str = Field(..., description="Tailored LaTeX source")
    model: Optional[str] = Field(None, description="Model that produced the text")
    degraded: bool = Field(
        False,
        description="True when the AI output was unusable and the original resume was returned",
    )


class KeywordRequest(BaseModel):
    """Free text (usually a job description) to scan for ATS keywords."""

    text: str = Field("", description="Text to scan")


class KeywordSummary(BaseModel):
    """ATS keywords found in a job description."""

    skills: List[str] = Field(default_factory=list, description="Technical skills and tools")
    qualifications: List[str] = Field(default_factory=list, description="Degrees, seniority and experience")
    other: List[str] = Field(default_factory=list, description="Soft skills and work arrangement")
