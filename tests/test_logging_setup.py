"""
Unit tests for logging setup.
"""

import io
import logging

from ai_trace.config.logging_setup import LOGGER_NAME, setup_logging


class TestSetupLogging:
    """Test setup_logging."""

    def setup_method(self):
        """Remember the package logger state."""
        self.logger = logging.getLogger(LOGGER_NAME)
        self.saved = (list(self.logger.handlers), self.logger.level, self.logger.propagate)

    def teardown_method(self):
        """Restore the package logger state."""
        handlers, level, propagate = self.saved
        self.logger.handlers = handlers
        self.logger.setLevel(level)
        self.logger.propagate = propagate

    def test_module_records_reach_stream(self):
        """Test records from package modules are written with the package format."""
        stream = io.StringIO()
        setup_logging(logging.DEBUG, stream=stream)

        logging.getLogger("ai_trace.transport.client").debug("Posting trace %s", "t-1")

        output = stream.getvalue()
        assert "ai-trace DEBUG" in output
        assert "[ai_trace.transport.client] Posting trace t-1" in output

    def test_level_filters_records(self):
        """Test records below the configured level are dropped."""
        stream = io.StringIO()
        logger = setup_logging(logging.WARNING, stream=stream)

        logging.getLogger("ai_trace.sdk.openai_client").info("hidden")
        logging.getLogger("ai_trace.sdk.openai_client").warning("shown")

        assert logger.level == logging.WARNING
        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_repeat_calls_keep_one_handler(self):
        """Test calling setup twice replaces the handler."""
        first = io.StringIO()
        second = io.StringIO()
        setup_logging(stream=first)
        logger = setup_logging(stream=second)

        logging.getLogger("ai_trace.core.streaming").warning("once")

        assert len(logger.handlers) == 1
        assert first.getvalue() == ""
        assert second.getvalue().count("once") == 1

    def test_other_loggers_untouched(self):
        """Test loggers outside the package are not configured."""
        root_handlers = list(logging.getLogger().handlers)
        stream = io.StringIO()
        logger = setup_logging(stream=stream)

        logging.getLogger("httpx").warning("not ours")

        assert logger.propagate is False
        assert logging.getLogger().handlers == root_handlers
        assert "not ours" not in stream.getvalue()
