"""Tests for logging, error handling and network helpers."""

import io

from ipdis.utils.error_handler import (
    ConfigurationError,
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
    IpdisError,
    TransportError,
    ValidationError,
)
from ipdis.utils.logger import LogLevel, Logger, get_log_level, get_logger, set_log_level
from ipdis.utils.network_utils import format_address, is_valid_ip, is_valid_port


class TestNetworkUtils:
    def test_valid_ip(self):
        assert is_valid_ip("192.168.1.255")
        assert is_valid_ip("0.0.0.0")

    def test_invalid_ip(self):
        assert not is_valid_ip("256.1.1.1")
        assert not is_valid_ip("::1")
        assert not is_valid_ip("kitchen")
        assert not is_valid_ip(3232235777)
        assert not is_valid_ip(None)

    def test_valid_port(self):
        assert is_valid_port(1901)
        assert is_valid_port(0)
        assert not is_valid_port(0, allow_ephemeral=False)

    def test_invalid_port(self):
        assert not is_valid_port(65536)
        assert not is_valid_port(-1)
        assert not is_valid_port("1901")
        assert not is_valid_port(True)

    def test_format_address(self):
        assert format_address(("10.0.0.1", 1902)) == "10.0.0.1:1902"


class TestLogger:
    def test_levels_are_filtered(self):
        stream = io.StringIO()
        logger = Logger("test", min_level=LogLevel.WARNING, stream=stream)
        logger.debug("hidden debug")
        logger.info("hidden info")
        logger.warning("shown warning")
        logger.error("shown error")
        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown warning" in output
        assert "shown error" in output

    def test_context_is_appended(self):
        stream = io.StringIO()
        Logger("test", min_level=LogLevel.DEBUG, stream=stream).info("Answered", addr="10.0.0.1:1902", size=3)
        assert "addr=10.0.0.1:1902 | size=3" in stream.getvalue()

    def test_exception_is_rendered(self):
        stream = io.StringIO()
        Logger("test", stream=stream).error("failed", exception=OSError("boom"))
        assert "exception=OSError: boom" in stream.getvalue()

    def test_process_wide_level(self):
        stream = io.StringIO()
        logger = Logger("test", stream=stream)
        set_log_level(LogLevel.ERROR)
        logger.warning("hidden")
        set_log_level(LogLevel.DEBUG)
        logger.debug("shown")
        assert get_log_level() == LogLevel.DEBUG
        assert stream.getvalue().count("\n") == 1
        assert "shown" in stream.getvalue()

    def test_default_stream_is_stderr(self, capsys):
        set_log_level(LogLevel.INFO)
        get_logger("ipdis.test").info("to stderr")
        captured = capsys.readouterr()
        assert "to stderr" in captured.err
        assert captured.out == ""

    def test_success_and_section(self):
        stream = io.StringIO()
        logger = Logger("test", min_level=LogLevel.INFO, stream=stream)
        logger.success("Listening", address="0.0.0.0:1901")
        logger.section("ip discovery beacon")
        output = stream.getvalue()
        assert "SUCCESS" in output
        assert "IP DISCOVERY BEACON" in output


class TestErrorHandler:
    def context(self, error_type, severity, **info):
        return ErrorContext(error_type, severity, "operation", "component", info)

    def test_hierarchy(self):
        for cls in (TransportError, ConfigurationError, ValidationError):
            assert issubclass(cls, IpdisError)
        assert IpdisError("x").error_context is None

    def test_non_critical_transport_error_continues(self, logger):
        handler = ErrorHandler(logger)
        context = self.context(ErrorType.TRANSPORT_ERROR, ErrorSeverity.MEDIUM)
        assert handler.handle_error(TransportError("send failed"), context) is True
        assert handler.error_statistics[ErrorType.TRANSPORT_ERROR] == 1

    def test_critical_transport_error_is_fatal(self, logger, log_stream):
        handler = ErrorHandler(logger)
        context = self.context(ErrorType.TRANSPORT_ERROR, ErrorSeverity.CRITICAL, port=80)
        assert handler.handle_error(TransportError("bind failed"), context) is False
        output = log_stream.getvalue()
        assert "UDP port 80" in output
        assert "elevated privileges" in output

    def test_configuration_error_is_fatal(self, logger, log_stream):
        handler = ErrorHandler(logger)
        context = self.context(ErrorType.CONFIGURATION_ERROR, ErrorSeverity.CRITICAL, config_file="sig.txt")
        assert handler.handle_error(ConfigurationError("unreadable"), context) is False
        assert "sig.txt" in log_stream.getvalue()

    def test_validation_error_is_fatal(self, logger):
        handler = ErrorHandler(logger)
        context = self.context(ErrorType.VALIDATION_ERROR, ErrorSeverity.HIGH)
        assert handler.handle_error(ValidationError("empty signature"), context) is False

    def test_subprocess_error_continues(self, logger):
        handler = ErrorHandler(logger)
        context = self.context(ErrorType.SUBPROCESS_ERROR, ErrorSeverity.HIGH)
        assert handler.handle_error(OSError("spawn failed"), context) is True

    def test_low_severity_logged_at_debug(self):
        stream = io.StringIO()
        handler = ErrorHandler(Logger("test", min_level=LogLevel.INFO, stream=stream))
        handler.handle_error(OSError("minor"), self.context(ErrorType.FILE_ERROR, ErrorSeverity.LOW))
        assert stream.getvalue() == ""

    def test_unreadable_signatures_file_is_fatal(self, logger, log_stream):
        handler = ErrorHandler(logger)
        context = self.context(ErrorType.FILE_ERROR, ErrorSeverity.CRITICAL, config_file="sig.txt")
        assert handler.handle_error(ConfigurationError("unreadable"), context) is False
        assert handler.error_statistics[ErrorType.FILE_ERROR] == 1
        assert "Cannot use sig.txt" in log_stream.getvalue()
