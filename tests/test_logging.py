"""
Unit tests for logging setup.
"""
import logging

from shared.utils.logging import setup_logging


class TestSetupLogging:
    """Tests for third-party logger levels."""

    def test_noisy_loggers_capped(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("google_genai").level == logging.WARNING

    def test_custom_quiet_list(self):
        setup_logging(level="INFO", quiet_loggers=["some.library"])
        assert logging.getLogger("some.library").level == logging.WARNING
