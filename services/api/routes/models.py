import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from shared.ai.gemini_client import GeminiClient
from shared.errors import ConfigurationError
from ..config import APIConfig
from ..dependencies import get_api_config

logger = logging.getLogger(__name__)
router = APIRouter(tags=["models"])


@router.get("/models")
async def list_models(
    api_key: Optional[str] = Query(None, alias="apiKey"),
    key: Optional[str] = Query(None),
    config: APIConfig = Depends(get_api_config),
):
    """List Gemini models visible to the given (or server) key."""
    resolved = api_key or key or config.gemini_api_key
    if not resolved:
        raise ConfigurationError("Missing GEMINI_API_KEY or apiKey")

    client = GeminiClient(resolved, timeout=config.gemini_timeout)
    models = await client.list_models()
    logger.info(f"Listed {len(models)} Gemini models")
    return {"models": models}
