"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, set_log_level, get_log_level, get_logger
from .error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity,
    IpdisError, TransportError, ConfigurationError, ValidationError
)
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'set_log_level',
    'get_log_level',
    'get_logger',
    'ErrorHandler',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'IpdisError',
    'TransportError',
    'ConfigurationError',
    'ValidationError',
    'network_utils'
]
