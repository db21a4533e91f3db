"""
Resume Tailor API - FastAPI Application

- Health endpoints work even if the Gemini key or compile service is missing
- Orchestrators are built once per app and stored on app.state
"""
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env file at startup (lightweight)
from dotenv import load_dotenv
load_dotenv()

from shared.ai.gemini_client import GeminiClient
from shared.ai.resume_tailor import DEFAULT_TEMPLATE_PATH, ResumeTailor
from shared.errors import ServiceError
from shared.utils.rate_limit import FixedWindowRateLimiter

from .config import APIConfig, get_config, log_gemini_key_status
from .latex_compiler import LatexCompiler
from .routes.health import router as health_router

logger = logging.getLogger(__name__)


def build_resume_tailor(config: APIConfig) -> ResumeTailor:
    """Tailoring orchestrator wired from configuration."""
    return ResumeTailor(
        client_factory=lambda key: GeminiClient(key, timeout=config.gemini_timeout),
        default_api_key=config.gemini_api_key,
        default_model=config.gemini_model,
        template_path=config.base_template_path or DEFAULT_TEMPLATE_PATH,
        experience_context=config.load_experience_context(),
        invisible_keywords=config.invisible_keywords,
        rate_limiter=FixedWindowRateLimiter(config.tailor_rate_limit, config.rate_limit_window_seconds),
    )


def build_latex_compiler(config: APIConfig) -> LatexCompiler:
    """Compilation orchestrator wired from configuration."""
    return LatexCompiler(
        service_url=config.latex_service_url,
        mirror_url=config.package_mirror_url,
        direct_timeout=config.compile_timeout,
        archive_timeout=config.archive_timeout,
        mirror_timeout=config.mirror_timeout,
        max_upload_bytes=config.max_upload_bytes,
        upload_rate_limiter=FixedWindowRateLimiter(config.upload_rate_limit, config.rate_limit_window_seconds),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    config = app.state.config
    logger.info("=" * 60)
    logger.info("RESUME TAILOR API STARTING")
    logger.info(f"Host: {config.host}")
    logger.info(f"Port: {config.port}")
    logger.info(f"PORT env var: {os.environ.get('PORT', 'not set')}")
    logger.info(f"Compile service: {config.latex_service_url}")
    logger.info("=" * 60)
    log_gemini_key_status()
    logger.info("Healthcheck endpoints: /health, /health/fast, /health/ready")

    yield

    logger.info("Shutting down Resume Tailor API...")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {detail}"})


def create_app(config: APIConfig = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or get_config()

    app = FastAPI(
        title="Resume Tailor API",
        description="Tailors LaTeX resumes with Gemini and compiles them to PDF",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.resume_tailor = build_resume_tailor(config)
    app.state.latex_compiler = build_latex_compiler(config)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Health router FIRST - it has no orchestrator dependencies
    app.include_router(health_router)

    from .routes import compile_router, models_router, resume_router

    app.include_router(resume_router, prefix="/api")
    app.include_router(compile_router, prefix="/api")
    app.include_router(models_router, prefix="/api")

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    from shared.utils.logging import setup_logging

    config = get_config()
    setup_logging(level="DEBUG" if config.debug else "INFO")

    uvicorn.run(
        "services.api.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )
