#!/usr/bin/env python3
"""Entry point for running the Resume Tailor API."""
import logging

import uvicorn
from services.api.config import get_config
from shared.utils.logging import setup_logging

logger = logging.getLogger("run_api")


def main():
    config = get_config()
    setup_logging(level="DEBUG" if config.debug else "INFO")
    logger.info(f"Starting Resume Tailor API on {config.host}:{config.port}")

    uvicorn.run(
        "services.api.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
