"""
Thin helpers around httpx for calling third-party services.

The compilation service is not trustworthy about its Content-Type header,
so PDF detection sniffs the body signature as well.
"""
from dataclasses import dataclass
from typing import Any

import httpx

PDF_SIGNATURE = b"%PDF"
MAX_SNIPPET_CHARS = 8000


def looks_like_pdf(body: bytes) -> bool:
    """True when the first four bytes are the PDF magic number."""
    return body[:4] == PDF_SIGNATURE


@dataclass
class UpstreamResponse:
    """Status, content type and body of one upstream HTTP exchange."""
    status_code: int
    content_type: str
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_pdf(self) -> bool:
        """Declared PDF content type OR a PDF signature in the body."""
        return "pdf" in self.content_type.lower() or looks_like_pdf(self.content)

    @property
    def succeeded(self) -> bool:
        return self.ok and self.is_pdf

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def snippet(self) -> str:
        """Short diagnostic text for attempt logs."""
        if self.is_pdf:
            return "unexpected non-ok while PDF-like"
        return self.text[:MAX_SNIPPET_CHARS]


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    timeout: float,
    **kwargs: Any,
) -> UpstreamResponse:
    """
    Perform one request with an explicit timeout.

    Transport failures (including timeouts) propagate as ``httpx.HTTPError``;
    HTTP error statuses are returned, not raised.
    """
    response = await client.request(method, url, timeout=timeout, **kwargs)
    return UpstreamResponse(
        status_code=response.status_code,
        content_type=response.headers.get("content-type", ""),
        content=response.content,
    )


def describe_http_error(exc: httpx.HTTPError) -> str:
    """Short error text for attempt logs. Never includes the request URL."""
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    detail = str(exc)
    name = type(exc).__name__
    return f"{name}: {detail[:300]}" if detail else name
