from .gemini_client import GeminiClient, KNOWN_GOOD_MODELS, build_model_candidates
from .prompts import build_prompt
from .resume_tailor import ResumeTailor

__all__ = [
    "GeminiClient",
    "KNOWN_GOOD_MODELS",
    "build_model_candidates",
    "build_prompt",
    "ResumeTailor",
]
