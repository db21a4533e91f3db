"""
Health check endpoints for container orchestration.

/health/fast has no imports from our codebase so it answers instantly
during startup.
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


# =============================================================================
# This endpoint MUST work even if the rest of the app is broken
# - NO imports from our codebase
# - NO config loading
# - ALWAYS returns HTTP 200
# =============================================================================
@router.get("/health/fast")
async def fast_health():
    """Minimal healthcheck - always returns 200."""
    return JSONResponse(content={"ok": True}, status_code=200)


# =============================================================================
# Secondary endpoints - these can have dependencies
# =============================================================================
@router.get("/health")
async def health_check():
    """Full health check with service status."""
    from datetime import datetime, timezone
    try:
        from ..config import get_config, get_gemini_api_key
        key, source = get_gemini_api_key()
        config = get_config()
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "resume-tailor-api",
            "gemini_key_loaded": key is not None,
            "gemini_env_source": source,
            "gemini_model": config.gemini_model,
            "latex_service_url": config.latex_service_url,
            "max_upload_bytes": config.max_upload_bytes,
        }
    except Exception as e:
        return {
            "status": "degraded",
            "error": str(e),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check for Kubernetes/Docker."""
    from datetime import datetime, timezone
    try:
        from ..config import get_gemini_api_key
        key, source = get_gemini_api_key()
        return {
            "status": "ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "gemini_key_loaded": key is not None,
            "gemini_env_source": source,
        }
    except Exception as e:
        return {
            "status": "not_ready",
            "error": str(e),
        }
