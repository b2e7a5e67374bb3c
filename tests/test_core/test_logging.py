"""
Tests for EVOLSTM logging system.
"""

import pytest
import logging
import logging.handlers
import json
from evolstm.core.logging import (
    setup_logging, get_logger, set_correlation_id,
    generate_correlation_id, log_with_correlation,
    CorrelationFilter, StructuredFormatter
)

pytestmark = [
    pytest.mark.core,
    pytest.mark.logging
]


class TestLoggingSetup:
    """Test logging setup and configuration."""

    @pytest.mark.unit
    def test_setup_logging_console_only(self):
        logger = setup_logging(level="DEBUG", enable_file=False, enable_console=True)

        assert logger.level == logging.DEBUG
        console_handlers = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(console_handlers) == 1

    @pytest.mark.unit
    def test_setup_logging_file_only(self, temp_dir):
        log_file = temp_dir / "logs" / "test.log"
        logger = setup_logging(level="INFO", log_file=log_file, enable_file=True, enable_console=False)

        assert logger.level == logging.INFO
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert log_file.parent.exists()

        for handler in logger.handlers:
            handler.close()
        setup_logging(level="DEBUG", enable_file=False)

    @pytest.mark.unit
    def test_repeated_setup_keeps_one_correlation_filter(self):
        setup_logging(enable_file=False)
        logger = setup_logging(enable_file=False)

        filters = [f for f in logger.filters if isinstance(f, CorrelationFilter)]
        assert len(filters) == 1

    @pytest.mark.unit
    def test_file_records_are_json(self, temp_dir):
        log_file = temp_dir / "structured.log"
        root = setup_logging(level="INFO", log_file=log_file, enable_file=True, enable_console=False)

        set_correlation_id("run-1")
        get_logger("evolstm.test").info("hello")
        for handler in root.handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        hello = [entry for entry in lines if entry["message"] == "hello"][0]
        assert hello["level"] == "INFO"
        assert hello["logger"] == "evolstm.test"
        assert hello["correlation_id"] == "run-1"

        for handler in root.handlers:
            handler.close()
        setup_logging(level="DEBUG", enable_file=False)


class TestStructuredFormatter:

    @pytest.mark.unit
    def test_format_includes_extra_fields(self):
        record = logging.LogRecord("evolstm", logging.WARNING, __file__, 10, "value %s", (3,), None)
        record.extra_fields = {"generation": 4}

        entry = json.loads(StructuredFormatter().format(record))
        assert entry["message"] == "value 3"
        assert entry["level"] == "WARNING"
        assert entry["generation"] == 4


class TestCorrelation:

    @pytest.mark.unit
    def test_filter_stamps_record(self):
        correlation_filter = CorrelationFilter()
        correlation_filter.set_correlation_id("abc")
        record = logging.LogRecord("evolstm", logging.INFO, __file__, 1, "msg", (), None)

        assert correlation_filter.filter(record) is True
        assert record.correlation_id == "abc"

    @pytest.mark.unit
    def test_generate_correlation_id_unique(self):
        assert generate_correlation_id() != generate_correlation_id()

    @pytest.mark.unit
    def test_log_with_correlation_returns_result(self, test_logger):
        @log_with_correlation
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    @pytest.mark.unit
    def test_log_with_correlation_reraises(self, test_logger):
        @log_with_correlation
        def fail():
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            fail()
