import os
import logging
from pathlib import Path
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def get_port_from_env() -> int:
    """
    Get port from environment.

    Hosting platforms set PORT directly (not API_PORT), so we check both.
    Priority: PORT > API_PORT > default 8080
    """
    port_str = os.environ.get("PORT") or os.environ.get("API_PORT") or "8080"
    try:
        return int(port_str)
    except ValueError:
        return 8080


def get_gemini_api_key() -> Tuple[Optional[str], Optional[str]]:
    """
    Get the Gemini API key from environment variables.

    Checks in order: API_GEMINI_API_KEY, GEMINI_API_KEY, GOOGLE_API_KEY

    Returns:
        Tuple of (api_key, source_env_var_name) or (None, None) if not found
    """
    env_vars = [
        "API_GEMINI_API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
    ]

    for var_name in env_vars:
        key = os.environ.get(var_name)
        if key and len(key.strip()) > 0:
            return key.strip(), var_name

    return None, None


class APIConfig(BaseSettings):
    """Configuration for the API service."""

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # CORS configuration
    cors_origins: str = "*"

    # Gemini
    gemini_model: Optional[str] = Field(
        None, validation_alias=AliasChoices("API_GEMINI_MODEL", "GEMINI_MODEL")
    )
    gemini_timeout: float = 60.0

    # Prompt content
    base_template_path: Optional[Path] = None  # bundled shared/templates/base.tex when unset
    experience_context_path: Optional[Path] = None
    invisible_keywords: bool = True

    # Compilation service
    latex_service_url: str = "https://latexonline.cc"
    package_mirror_url: str = "https://mirrors.ctan.org/macros/latex/contrib"
    compile_timeout: float = 40.0
    archive_timeout: float = 120.0
    mirror_timeout: float = 30.0
    max_upload_bytes: int = Field(
        5 * 1024 * 1024, validation_alias=AliasChoices("API_MAX_UPLOAD_BYTES", "MAX_UPLOAD_BYTES")
    )

    # Rate limits (requests per window, per client IP)
    rate_limit_window_seconds: float = 60.0
    tailor_rate_limit: int = 20
    upload_rate_limit: int = 30

    class Config:
        env_prefix = "API_"
        env_file = ".env"
        extra = "ignore"

    @property
    def gemini_api_key(self) -> Optional[str]:
        """Get Gemini API key from environment (supports multiple var names)."""
        key, _ = get_gemini_api_key()
        return key

    @property
    def gemini_key_loaded(self) -> bool:
        """Check if a Gemini API key is available."""
        key, _ = get_gemini_api_key()
        return key is not None

    @property
    def gemini_env_source(self) -> Optional[str]:
        """Get the env var name that provided the Gemini key."""
        _, source = get_gemini_api_key()
        return source

    def load_experience_context(self) -> Optional[str]:
        """Narrative experience context for the richer prompt, if configured."""
        if not self.experience_context_path:
            return None
        try:
            return self.experience_context_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read experience context {self.experience_context_path}: {e}")
            return None


def get_config() -> APIConfig:
    """Get API configuration from environment."""
    config = APIConfig()
    # PORT from the hosting platform wins over API_PORT
    return config.model_copy(update={"port": get_port_from_env()})


def mask_key(key: str) -> str:
    """Placeholder for a secret that reveals only its length."""
    return f"***({len(key)} chars)"


def log_gemini_key_status():
    """Log Gemini API key status at startup (does NOT log the key itself)."""
    key, source = get_gemini_api_key()
    if key:
        logger.info(f"Gemini API key FOUND from {source} (masked: {mask_key(key)})")
    else:
        logger.warning("Gemini API key NOT FOUND - checked: API_GEMINI_API_KEY, GEMINI_API_KEY, GOOGLE_API_KEY "
                       "(clients may still pass apiKey per request)")
