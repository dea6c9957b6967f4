"""
Error types and centralized error reporting for the beacon and the scanner.

Only transport failures and bad startup input are fatal. Protocol-level
conditions (bad signature, rate limiting, undecodable answers) never reach
this module; they are absorbed where they happen.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .logger import Logger, get_logger


class ErrorType(Enum):
    TRANSPORT_ERROR = "transport_error"
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    SUBPROCESS_ERROR = "subprocess_error"
    FILE_ERROR = "file_error"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Where and how badly something failed.

    Attributes:
        error_type: Category used to pick the handling strategy
        severity: Decides the log level and whether the caller may continue
        operation: What was being done (bind, receive, broadcast...)
        component: Class or tool reporting the error
        additional_info: Free-form details, e.g. ``port`` or ``config_file``
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    additional_info: Dict[str, Any] = field(default_factory=dict)


class IpdisError(Exception):
    """Base exception carrying an optional ErrorContext."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class TransportError(IpdisError):
    """A socket could not be bound, or a send/receive failed."""


class ConfigurationError(IpdisError):
    """A configuration or signatures file could not be used."""


class ValidationError(IpdisError):
    """A value given on the command line is not acceptable."""


class ErrorHandler:
    """
    Logs errors at the level matching their severity, counts them per type
    and prints troubleshooting hints for fatal ones.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {error_type: 0 for error_type in ErrorType}

    def handle_error(self, error: Exception, context: ErrorContext) -> bool:
        """
        Report an error.

        Args:
            error: The exception that occurred
            context: Error context information

        Returns:
            bool: True if the caller may carry on, False if the error is fatal
        """
        self.error_statistics[context.error_type] += 1
        self._log_error(error, context)

        handlers = {
            ErrorType.TRANSPORT_ERROR: self._handle_transport_error,
            ErrorType.CONFIGURATION_ERROR: self._handle_configuration_error,
            ErrorType.VALIDATION_ERROR: self._handle_validation_error,
            ErrorType.FILE_ERROR: self._handle_file_error,
        }
        handler = handlers.get(context.error_type)
        if handler is not None:
            return handler(context)
        # a failed inventory subprocess only loses part of an answer
        return context.severity != ErrorSeverity.CRITICAL

    def _log_error(self, error: Exception, context: ErrorContext) -> None:
        message = f"Error in {context.component}.{context.operation}: {error}"
        if context.severity == ErrorSeverity.CRITICAL:
            self.logger.error(message, exception=error.__cause__ or error)
            return
        log = {
            ErrorSeverity.HIGH: self.logger.error,
            ErrorSeverity.MEDIUM: self.logger.warning,
            ErrorSeverity.LOW: self.logger.debug,
        }[context.severity]
        log(message)

    def _hints(self, title: str, *hints: str) -> None:
        self.logger.info(title)
        for hint in hints:
            self.logger.info(f"  • {hint}")

    def _handle_transport_error(self, context: ErrorContext) -> bool:
        # a single failed broadcast is not fatal, a dead socket is
        if context.severity != ErrorSeverity.CRITICAL:
            return True

        hints = []
        port = context.additional_info.get('port')
        if port is not None:
            hints.append(f"Check that UDP port {port} is not already in use")
            if 0 < port < 1024:
                hints.append("Ports below 1024 require elevated privileges")
        hints.append("Check that the listening address belongs to this host")
        hints.append("Check firewall rules for UDP broadcast traffic")
        self._hints("Transport troubleshooting suggestions:", *hints)
        return False

    def _handle_configuration_error(self, context: ErrorContext) -> bool:
        self.logger.error(f"Configuration error in {context.additional_info.get('config_file', 'unknown')}")
        self._hints(
            "Configuration error solutions:",
            "Check that the file exists and is readable",
            "Check YAML syntax and indentation",
        )
        return False

    def _handle_validation_error(self, context: ErrorContext) -> bool:
        self._hints(
            "Validation error solutions:",
            "Verify IP addresses are in dotted IPv4 format",
            "Ports must be between 0 and 65535",
            "Signatures must not be empty",
        )
        return False

    def _handle_file_error(self, context: ErrorContext) -> bool:
        if context.severity != ErrorSeverity.CRITICAL:
            return True
        self._hints(
            f"Cannot use {context.additional_info.get('config_file', 'file')}:",
            "Check that the file exists and is readable",
            "Signatures files must be UTF-8 text, one signature per line",
        )
        return False
