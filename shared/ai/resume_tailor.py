import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Tuple

from shared.errors import (
    ConfigurationError,
    RateLimited,
    UpstreamCallError,
    UpstreamExhausted,
    ValidationError,
)
from shared.latex.engines import has_documentclass, strip_code_fences
from shared.schemas.resume import TailorRequest, TailorResult
from shared.utils.rate_limit import NoRateLimit, RateLimiter
from shared.utils.retry import call_with_backoff

from .gemini_client import GeminiClient, TextGenerator, build_model_candidates
from .prompts import build_prompt

logger = logging.getLogger(__name__)

MIN_JOB_DESCRIPTION_LENGTH = 16
DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "base.tex"


def _is_rate_limit(exc: Exception) -> bool:
    return isinstance(exc, UpstreamCallError) and exc.status == 429


class ResumeTailor:
    """
    Rewrites a LaTeX resume for a job description with Gemini.

    Models are tried one at a time in candidate order and the first
    non-empty answer wins. A 429 retries the same model with exponential
    backoff; any other failure moves straight to the next model. When the
    SDK path produces nothing for every model, the whole list is tried
    again over the raw v1 REST endpoint.
    """

    def __init__(
        self,
        *,
        client_factory: Callable[[str], TextGenerator] = GeminiClient,
        default_api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        template_path: Optional[Path] = DEFAULT_TEMPLATE_PATH,
        experience_context: Optional[str] = None,
        invisible_keywords: bool = True,
        rate_limiter: Optional[RateLimiter] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client_factory = client_factory
        self.default_api_key = default_api_key
        self.default_model = default_model
        self.template_path = template_path
        self.experience_context = experience_context
        self.invisible_keywords = invisible_keywords
        self.rate_limiter = rate_limiter or NoRateLimit()
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep

    def load_base_resume(self, base_resume: Optional[str]) -> str:
        """Explicit resume when given, else the bundled default template."""
        if base_resume and base_resume.strip():
            return base_resume
        if self.template_path is not None and Path(self.template_path).is_file():
            return Path(self.template_path).read_text(encoding="utf-8")
        raise ValidationError("No resume provided and no default template is available")

    async def _generate_with_retry(self, generator: TextGenerator, model: str, prompt: str) -> str:
        return await call_with_backoff(
            lambda: generator.generate(model, prompt),
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            is_retryable=_is_rate_limit,
            sleep=self._sleep,
            label=f"Gemini {model}",
        )

    async def _first_text(
        self, generator: TextGenerator, candidates: List[str], prompt: str
    ) -> Tuple[str, Optional[str]]:
        for model in candidates:
            try:
                text = await self._generate_with_retry(generator, model, prompt)
            except UpstreamCallError as e:
                logger.warning(f"Model {model} failed (status={e.status}), trying next")
                continue
            if text and text.strip():
                return text, model

        logger.warning("SDK path returned nothing for every model, falling back to v1 REST")
        for model in candidates:
            try:
                text = await generator.generate_raw(model, prompt)
            except UpstreamCallError as e:
                logger.warning(f"v1 REST {model} failed (status={e.status}), trying next")
                continue
            if text and text.strip():
                return text, model
        return "", None

    async def tailor(self, request: TailorRequest, client_id: str = "unknown") -> TailorResult:
        """
        Tailor ``request.base_resume`` (or the default template) to the job description.

        Raises:
            ValidationError: job description missing or shorter than 16 characters
            RateLimited: client exceeded its request budget
            ConfigurationError: no API key in the request or the server config
            UpstreamExhausted: no model produced any text on either calling convention
        """
        job_description = (request.job_description or "").strip()
        if len(job_description) < MIN_JOB_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Job description is required and should be at least {MIN_JOB_DESCRIPTION_LENGTH} characters"
            )

        if not self.rate_limiter.check_and_increment(client_id):
            logger.warning(f"Tailor rate limit exceeded for {client_id}")
            raise RateLimited()

        api_key = request.api_key or self.default_api_key
        if not api_key:
            raise ConfigurationError("Missing GEMINI_API_KEY (set env or pass apiKey)")

        base = self.load_base_resume(request.base_resume)
        prompt = build_prompt(
            base,
            request.job_description,
            experience_context=self.experience_context,
            invisible_keywords=self.invisible_keywords,
        )
        candidates = build_model_candidates(request.model, self.default_model)
        logger.info(f"Tailoring resume: {len(base)} chars of LaTeX, {len(candidates)} candidate models")

        generator = self.client_factory(api_key)
        try:
            text, model = await self._first_text(generator, candidates, prompt)
        finally:
            await generator.aclose()
        if not text:
            logger.error(f"Gemini call failed across models (SDK v1beta + HTTP v1): {candidates}")
            raise UpstreamExhausted("Gemini API call failed. Try a different model.", tried=candidates)

        tex = strip_code_fences(text).strip()
        if not has_documentclass(tex):
            logger.warning(f"Output from {model} has no \\documentclass, returning the original resume")
            return TailorResult(latex=base, model=model, degraded=True)

        logger.info(f"Tailored resume produced by {model}")
        return TailorResult(latex=tex, model=model)
