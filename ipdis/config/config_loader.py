"""
Configuration loader for the beacon and the scanner.
Handles loading and validation of YAML configuration files with fallback to
defaults, and parsing of accepted-signature files.
"""

import yaml
from typing import Any, List, Optional, Union
from dataclasses import dataclass, field
from pathlib import Path

from ..core.codec import Signature
from ..core.data_models import (
    BEACON_RECV_BUFFER_DEFAULT,
    BROADCAST_ADDR_DEFAULT,
    INVENTORY_TIMEOUT_DEFAULT,
    LISTENING_ADDR_DEFAULT,
    PRINT_PERIOD_DEFAULT,
    RATE_LIMIT_WINDOW_DEFAULT,
    SCAN_PERIOD_DEFAULT,
    SCANNER_PORT_DEFAULT,
    SCANNER_RECV_BUFFER_DEFAULT,
    SERVER_PORT_DEFAULT,
    default_signatures,
)
from ..utils.error_handler import ConfigurationError, ErrorContext, ErrorSeverity, ErrorType
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import is_valid_ip, is_valid_port


@dataclass
class ServerConfig:
    """Configuration for the beacon."""
    port: int = SERVER_PORT_DEFAULT
    listening_addr: str = LISTENING_ADDR_DEFAULT
    signatures: List[Signature] = field(default_factory=default_signatures)
    inventory_files: List[Path] = field(default_factory=list)
    recv_buffer: int = BEACON_RECV_BUFFER_DEFAULT
    rate_limit_window: float = RATE_LIMIT_WINDOW_DEFAULT
    inventory_timeout: float = INVENTORY_TIMEOUT_DEFAULT


@dataclass
class ScannerConfig:
    """Configuration for the scanner."""
    port: int = SCANNER_PORT_DEFAULT
    listening_addr: str = LISTENING_ADDR_DEFAULT
    scan_period: float = SCAN_PERIOD_DEFAULT
    broadcast_addr: str = BROADCAST_ADDR_DEFAULT
    target_port: int = SERVER_PORT_DEFAULT
    signatures: List[Signature] = field(default_factory=default_signatures)
    recv_buffer: int = SCANNER_RECV_BUFFER_DEFAULT
    print_period: float = PRINT_PERIOD_DEFAULT


def parse_signatures_file(
    path: Union[str, Path],
    logger: Optional[Logger] = None,
    max_length: int = BEACON_RECV_BUFFER_DEFAULT,
) -> List[Signature]:
    """
    Read accepted signatures from a file, one per line.

    Lines end at LF only; a trailing CR is dropped and blank lines are
    ignored. Signatures longer than max_length bytes are kept but can never
    match, since queries are truncated before comparison.

    Raises:
        ConfigurationError: If the file cannot be read as UTF-8 text
    """
    logger = logger or get_logger(__name__)
    path = Path(path)
    logger.info(f"Reading signatures from {path}")

    try:
        text = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        context = ErrorContext(
            error_type=ErrorType.FILE_ERROR,
            severity=ErrorSeverity.CRITICAL,
            operation="parse_signatures_file",
            component="ConfigLoader",
            additional_info={"config_file": str(path)},
        )
        raise ConfigurationError(f"Cannot read signatures file {path}: {e}", context) from e

    signatures = []
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        signature = Signature.from_str(line)
        if len(signature) > max_length:
            logger.warning(
                f"Signature longer than {max_length} bytes will never match",
                signature=line[:32] + "...",
            )
        signatures.append(signature)

    if not signatures:
        logger.warning(f"No signatures found in {path}")
    return signatures


class ConfigLoader:
    """
    Loads and validates YAML configuration files for the beacon and the scanner.
    Provides fallback to default configurations when files are missing or invalid.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)

    def load_server_config(self, config_file: Optional[Union[str, Path]] = None) -> ServerConfig:
        """
        Load beacon configuration from the `beacon` section of a YAML file.

        Args:
            config_file: Path of the YAML file, None for defaults

        Returns:
            ServerConfig object with loaded or default configuration
        """
        data = self._load_section(config_file, "beacon")
        if data is None:
            return ServerConfig()

        config = ServerConfig(
            port=self._validate_port(data.get('port', SERVER_PORT_DEFAULT), 'port', SERVER_PORT_DEFAULT),
            listening_addr=self._validate_ip(data.get('listening_addr', LISTENING_ADDR_DEFAULT), 'listening_addr', LISTENING_ADDR_DEFAULT),
            inventory_files=self._validate_paths(data.get('inventory_files', []), 'inventory_files'),
            recv_buffer=self._validate_positive_int(data.get('recv_buffer', BEACON_RECV_BUFFER_DEFAULT), 'recv_buffer', BEACON_RECV_BUFFER_DEFAULT),
            rate_limit_window=self._validate_positive_float(data.get('rate_limit_window', RATE_LIMIT_WINDOW_DEFAULT), 'rate_limit_window', RATE_LIMIT_WINDOW_DEFAULT),
            inventory_timeout=self._validate_positive_float(data.get('inventory_timeout', INVENTORY_TIMEOUT_DEFAULT), 'inventory_timeout', INVENTORY_TIMEOUT_DEFAULT),
        )
        config.signatures = self._load_signatures(data, config_file, config.recv_buffer)
        return config

    def load_scanner_config(self, config_file: Optional[Union[str, Path]] = None) -> ScannerConfig:
        """
        Load scanner configuration from the `scanner` section of a YAML file.

        Args:
            config_file: Path of the YAML file, None for defaults

        Returns:
            ScannerConfig object with loaded or default configuration
        """
        data = self._load_section(config_file, "scanner")
        if data is None:
            return ScannerConfig()

        config = ScannerConfig(
            port=self._validate_port(data.get('port', SCANNER_PORT_DEFAULT), 'port', SCANNER_PORT_DEFAULT),
            listening_addr=self._validate_ip(data.get('listening_addr', LISTENING_ADDR_DEFAULT), 'listening_addr', LISTENING_ADDR_DEFAULT),
            scan_period=self._validate_positive_float(data.get('scan_period', SCAN_PERIOD_DEFAULT), 'scan_period', SCAN_PERIOD_DEFAULT),
            broadcast_addr=self._validate_ip(data.get('broadcast_addr', BROADCAST_ADDR_DEFAULT), 'broadcast_addr', BROADCAST_ADDR_DEFAULT),
            target_port=self._validate_port(data.get('target_port', SERVER_PORT_DEFAULT), 'target_port', SERVER_PORT_DEFAULT),
            recv_buffer=self._validate_positive_int(data.get('recv_buffer', SCANNER_RECV_BUFFER_DEFAULT), 'recv_buffer', SCANNER_RECV_BUFFER_DEFAULT),
            print_period=self._validate_positive_float(data.get('print_period', PRINT_PERIOD_DEFAULT), 'print_period', PRINT_PERIOD_DEFAULT),
        )
        config.signatures = self._load_signatures(data, config_file, BEACON_RECV_BUFFER_DEFAULT)
        return config

    def _load_section(self, config_file: Optional[Union[str, Path]], section: str) -> Optional[dict]:
        """Return the named section of a YAML file, or None to use defaults."""
        if config_file is None:
            return None

        config_path = Path(config_file)
        if not config_path.exists():
            self.logger.warning(f"Config file not found at {config_path}. Using default configuration.")
            return None

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing config file {config_path}: {e}")
            self.logger.warning("Using default configuration.")
            return None
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Cannot read config file {config_path}: {e}")
            self.logger.warning("Using default configuration.")
            return None

        if not isinstance(config_data, dict) or not isinstance(config_data.get(section), dict):
            self.logger.warning(f"No '{section}' section in {config_path}. Using default configuration.")
            return None

        return config_data[section]

    def _load_signatures(self, data: dict, config_file, max_length: int) -> List[Signature]:
        """Signatures come from `signatures_file` (relative to the config file) or `signatures`."""
        signatures_file = data.get('signatures_file')
        if signatures_file:
            path = Path(signatures_file)
            if not path.is_absolute():
                path = Path(config_file).parent / path
            return parse_signatures_file(path, self.logger, max_length)

        signatures = data.get('signatures')
        if signatures is None:
            return default_signatures()
        if not isinstance(signatures, list) or not all(isinstance(s, str) and s for s in signatures):
            self.logger.warning(f"Invalid signatures: {signatures}. Must be a list of strings. Using default.")
            return default_signatures()
        return [Signature.from_str(s) for s in signatures]

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        try:
            int_value = int(value)
            if int_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return int_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default

    def _validate_positive_float(self, value: Any, field_name: str, default: float) -> float:
        try:
            float_value = float(value)
            if not float_value > 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return float_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default

    def _validate_port(self, value: Any, field_name: str, default: int) -> int:
        if not is_valid_port(value):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be 0-65535. Using default: {default}")
            return default
        return value

    def _validate_ip(self, value: Any, field_name: str, default: str) -> str:
        if not is_valid_ip(value):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an IPv4 address. Using default: {default}")
            return default
        return value

    def _validate_paths(self, value: Any, field_name: str) -> List[Path]:
        if not isinstance(value, list):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a list. Ignoring.")
            return []
        return [Path(str(item)) for item in value]
