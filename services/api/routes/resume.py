import logging
from fastapi import APIRouter, Depends

from shared.ai.resume_tailor import ResumeTailor
from shared.schemas.resume import KeywordRequest, KeywordSummary, TailorRequest, TailorResult
from shared.utils.keywords import extract_keywords
from ..dependencies import client_ip, get_resume_tailor

logger = logging.getLogger(__name__)
router = APIRouter(tags=["resume"])


@router.post("/tailor", response_model=TailorResult)
async def tailor_resume(
    request: TailorRequest,
    tailor: ResumeTailor = Depends(get_resume_tailor),
    ip: str = Depends(client_ip),
):
    """
    Tailor a LaTeX resume for a job description.

    Body: {jobDescription, baseResume?, apiKey?, model?}. The bundled
    template is used when baseResume is omitted.
    """
    logger.info(f"Tailor request from {ip}: {len(request.job_description)} chars of job description")
    return await tailor.tailor(request, client_id=ip)


@router.post("/keywords", response_model=KeywordSummary)
async def keywords(request: KeywordRequest):
    """ATS keywords (skills, qualifications, other) found in a job description."""
    return extract_keywords(request.text)
