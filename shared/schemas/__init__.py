from .resume import TailorRequest, TailorResult, KeywordRequest, KeywordSummary
from .compile import CompileRequest, CompileResult, EngineAttempt, UploadedSource

__all__ = [
    "TailorRequest",
    "TailorResult",
    "KeywordRequest",
    "KeywordSummary",
    "CompileRequest",
    "CompileResult",
    "EngineAttempt",
    "UploadedSource",
]
