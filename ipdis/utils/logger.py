"""
Colored console logging for the beacon and the scanner.

Lines look like ``[12:00:01] INFO    ipdisserver: Answered (addr=10.0.0.2:1902)``
and are always written to stderr; stdout belongs to the scanner's beacon
table. The minimum level is process-wide and set once by the CLI.
"""

import sys
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, TextIO
from colorama import Fore, Style, init

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class LogLevel(Enum):
    """Log levels, lowest first."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


LEVEL_ORDER = {level: rank for rank, level in enumerate(LogLevel)}

_min_level = LogLevel.INFO


class Logger:
    """
    Named logger writing one colored line per message.

    Loggers built without ``min_level`` follow the process-wide level, so the
    CLI can change verbosity after components captured their logger.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: Fore.CYAN,
        LogLevel.INFO: Fore.GREEN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }

    def __init__(
        self,
        name: str = "ipdis",
        min_level: Optional[LogLevel] = None,
        stream: Optional[TextIO] = None,
    ):
        """
        Args:
            name: Shown on every line
            min_level: Fixed minimum level, None to follow set_log_level()
            stream: Output stream, sys.stderr (looked up on each write) if None
        """
        self.name = name
        self.min_level = min_level
        self.stream = stream

    @property
    def effective_level(self) -> LogLevel:
        return self.min_level if self.min_level is not None else _min_level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self.effective_level]

    def _write(self, line: str) -> None:
        stream = self.stream if self.stream is not None else sys.stderr
        print(line, file=stream, flush=True)

    @staticmethod
    def _context(details: Dict) -> str:
        if not details:
            return ""
        pairs = " | ".join(f"{key}={value}" for key, value in details.items())
        return f" {Style.DIM}({pairs}){Style.RESET_ALL}"

    def _line(self, label: str, message: str, details: Dict) -> str:
        stamp = datetime.now().strftime("%H:%M:%S")
        return f"{Style.DIM}[{stamp}]{Style.RESET_ALL} {label} {message}{self._context(details)}"

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        if not self.is_enabled_for(level):
            return
        label = (
            f"{self.LEVEL_COLORS[level]}{level.value:<7}{Style.RESET_ALL} "
            f"{Style.DIM}{self.name}:{Style.RESET_ALL}"
        )
        self._write(self._line(label, message, kwargs))

    def debug(self, message: str, **kwargs) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(
        self, message: str, exception: Optional[BaseException] = None, **kwargs
    ) -> None:
        """
        Log an error message.

        Args:
            message: Error message
            exception: Rendered as ``exception=Type: text`` in the context
            **kwargs: Additional context information
        """
        if exception is not None:
            kwargs["exception"] = f"{type(exception).__name__}: {exception}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Highlighted INFO line for milestones such as a successful bind."""
        if self.is_enabled_for(LogLevel.INFO):
            label = f"{Fore.GREEN}SUCCESS{Style.RESET_ALL}"
            self._write(self._line(label, f"{Style.BRIGHT}{message}{Style.RESET_ALL}", kwargs))

    def section(self, title: str) -> None:
        """Banner printed at INFO when a tool starts."""
        if not self.is_enabled_for(LogLevel.INFO):
            return
        rule = "=" * 60
        self._write(f"\n{Fore.BLUE}{Style.BRIGHT}{rule}\n  {title.upper()}\n{rule}{Style.RESET_ALL}\n")


def set_log_level(level: LogLevel) -> None:
    """Set the minimum level of every logger without an explicit one."""
    global _min_level
    _min_level = level


def get_log_level() -> LogLevel:
    return _min_level


def get_logger(name: str = "ipdis") -> Logger:
    return Logger(name)
