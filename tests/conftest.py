"""
Shared fixtures: sample documents, a scripted Gemini stand-in and a
recording mock transport for the compilation service.
"""
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

from shared.errors import UpstreamCallError

SIMPLE_DOC = "\\documentclass{article}\n\\begin{document}\nHello\n\\end{document}\n"
FONT_DOC = (
    "\\documentclass{article}\n\\usepackage{fontspec}\n\\setmainfont{Arial}\n"
    "\\begin{document}\nHello\n\\end{document}\n"
)
BASE_RESUME = (
    "\\documentclass[letterpaper,11pt]{article}\n\\begin{document}\n"
    "\\section{Experience}\nBuilt things.\n\\end{document}\n"
)
JOB_DESCRIPTION = "Senior Python engineer with Kubernetes and AWS experience."
PDF_BYTES = b"%PDF-1.5\n%fake pdf body\n%%EOF\n"

Scripted = Union[str, Exception]


class FakeGenerator:
    """
    Scripted TextGenerator.

    ``sdk`` and ``raw`` map a model name to the results returned on
    successive calls; the last entry repeats. Unknown models return "".
    """

    def __init__(self, sdk: Dict[str, List[Scripted]] = None, raw: Dict[str, List[Scripted]] = None):
        self.sdk = {k: list(v) for k, v in (sdk or {}).items()}
        self.raw = {k: list(v) for k, v in (raw or {}).items()}
        self.calls: List[Tuple[str, str]] = []
        self.prompts: List[str] = []
        self.close_count = 0

    def _next(self, script: Dict[str, List[Scripted]], model: str) -> str:
        results = script.get(model)
        if not results:
            return ""
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def generate(self, model: str, prompt: str) -> str:
        self.calls.append(("sdk", model))
        self.prompts.append(prompt)
        return self._next(self.sdk, model)

    async def generate_raw(self, model: str, prompt: str) -> str:
        self.calls.append(("raw", model))
        self.prompts.append(prompt)
        return self._next(self.raw, model)

    async def aclose(self) -> None:
        self.close_count += 1

    def calls_for(self, convention: str) -> List[str]:
        return [model for conv, model in self.calls if conv == convention]


def rate_limited() -> UpstreamCallError:
    return UpstreamCallError("quota exceeded", status=429)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def fake_sleep():
    """Async sleep replacement recording requested delays."""
    delays: List[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays
    return sleep


@pytest.fixture
def clear_gemini_env(monkeypatch):
    for name in ("API_GEMINI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
