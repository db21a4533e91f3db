import logging
import sys
from typing import Iterable, Optional

# httpx logs full request URLs at INFO; GET compile requests carry the whole document
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (optional)
        quiet_loggers: Third-party loggers capped at WARNING
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
