"""
Gemini access for resume tailoring.

Two calling conventions are supported: the google-genai SDK (v1beta API)
is the primary path, and a plain HTTP call against the v1 REST endpoint
is kept as a whole-pipeline fallback for keys or models the SDK path
rejects.

The API key always travels in the ``x-goog-api-key`` header so it can
never show up in URLs, exception messages or logs.
"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol
from urllib.parse import quote

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from shared.errors import UpstreamCallError
from shared.utils.http import describe_http_error, send_request

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com"

# Tried after the requested and server-default models, in this order.
KNOWN_GOOD_MODELS = [
    "gemini-1.5-flash-latest",
    "gemini-1.5-flash",
    "gemini-1.5-pro-latest",
    "gemini-1.5-pro",
    "gemini-1.5-flash-8b",
    "gemini-pro",
    "gemini-1.0-pro",
    "gemini-1.0-pro-latest",
    "gemini-2.0-flash-001",
    "gemini-2.0-pro-001",
]

NON_TEXT_MARKERS = ("embedding", "gecko")


def build_model_candidates(
    requested: Optional[str] = None,
    default: Optional[str] = None,
    known_good: Iterable[str] = KNOWN_GOOD_MODELS,
) -> List[str]:
    """
    Ordered, de-duplicated list of text models to try.

    Empty names and embedding/gecko models are dropped; the first
    occurrence of a name keeps its position.
    """
    candidates: List[str] = []
    for name in [requested, default, *known_good]:
        if not name or not isinstance(name, str):
            continue
        name = name.strip()
        if not name or any(marker in name for marker in NON_TEXT_MARKERS):
            continue
        if name not in candidates:
            candidates.append(name)
    return candidates


class TextGenerator(Protocol):
    """What the tailoring pipeline needs from a generative-text provider."""

    async def generate(self, model: str, prompt: str) -> str:
        """Primary calling convention. Raises UpstreamCallError on failure."""
        ...

    async def generate_raw(self, model: str, prompt: str) -> str:
        """Fallback calling convention. Raises UpstreamCallError on failure."""
        ...

    async def aclose(self) -> None:
        """Release any connections held for this request."""
        ...


def _text_from_payload(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "\n".join(part["text"] for part in parts if part.get("text"))


class GeminiClient:
    """Gemini text generation via the SDK, with a raw REST fallback."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 60.0,
        api_base: str = GEMINI_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")
        self._transport = transport
        self._sdk: Optional[genai.Client] = None

    def __repr__(self) -> str:
        return f"GeminiClient(api_base={self.api_base!r}, timeout={self.timeout})"

    def _get_sdk(self) -> genai.Client:
        """Create the SDK client lazily; it is only needed on the primary path."""
        if self._sdk is None:
            self._sdk = genai.Client(
                api_key=self._api_key,
                http_options=genai_types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._sdk

    async def generate(self, model: str, prompt: str) -> str:
        try:
            response = await self._get_sdk().aio.models.generate_content(model=model, contents=prompt)
        except genai_errors.APIError as e:
            raise UpstreamCallError(f"Gemini model {model} failed: {e.message}", status=e.code) from e
        except httpx.HTTPError as e:
            raise UpstreamCallError(f"Gemini model {model} failed: {describe_http_error(e)}") from e
        except Exception as e:
            # SDK-side failures (bad model name, malformed response) abandon this model
            raise UpstreamCallError(f"Gemini model {model} failed: {type(e).__name__}") from e
        return response.text or ""

    async def aclose(self) -> None:
        """Close the SDK's async HTTP client, if one was created."""
        if self._sdk is None:
            return
        sdk, self._sdk = self._sdk, None
        # AsyncClient.aclose only exists in newer google-genai releases
        aclose = getattr(sdk.aio, "aclose", None)
        if aclose is not None:
            await aclose()

    async def generate_raw(self, model: str, prompt: str) -> str:
        url = f"{self.api_base}/v1/models/{quote(model, safe='')}:generateContent"
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await send_request(
                    client,
                    "POST",
                    url,
                    timeout=self.timeout,
                    headers={"x-goog-api-key": self._api_key},
                    json=body,
                )
            except httpx.HTTPError as e:
                raise UpstreamCallError(f"v1 generateContent failed: {describe_http_error(e)}") from e

        if not response.ok:
            raise UpstreamCallError(
                f"v1 generateContent failed {response.status_code}", status=response.status_code
            )
        try:
            return _text_from_payload(json.loads(response.content))
        except (ValueError, AttributeError, TypeError) as e:
            raise UpstreamCallError(f"v1 generateContent returned an unreadable body: {e}") from e

    async def _list_models(self, client: httpx.AsyncClient, api_version: str) -> List[Dict[str, Any]]:
        response = await send_request(
            client,
            "GET",
            f"{self.api_base}/{api_version}/models",
            timeout=self.timeout,
            headers={"x-goog-api-key": self._api_key},
        )
        if not response.ok:
            raise UpstreamCallError(
                f"ListModels {api_version} failed: {response.status_code}", status=response.status_code
            )
        return json.loads(response.content).get("models") or []

    async def list_models(self) -> List[Dict[str, Any]]:
        """Models visible to this key: v1beta first, v1 when v1beta is empty or fails."""
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                models = await self._list_models(client, "v1beta")
            except (UpstreamCallError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"ListModels v1beta failed, trying v1: {e}")
                models = []
            if models:
                return models
            try:
                return await self._list_models(client, "v1")
            except httpx.HTTPError as e:
                raise UpstreamCallError(f"ListModels v1 failed: {describe_http_error(e)}") from e
            except ValueError as e:
                raise UpstreamCallError(f"ListModels v1 returned an unreadable body: {e}") from e
