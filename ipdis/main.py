"""
Command-line entry points for the beacon (ipdisserver) and the scanner
(ipdisscan).

This module handles argument parsing, process-wide logging setup, building
the configuration from YAML files and flags, and turning fatal errors into
exit codes.
"""

import argparse
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from . import __version__
from .beacon import responder as beacon
from .config.config_loader import ConfigLoader, ServerConfig, ScannerConfig, parse_signatures_file
from .core.codec import Signature
from .core.data_models import SIGNATURE_DEFAULT
from .scanner.orchestrator import ScanOrchestrator
from .utils.error_handler import (
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
    IpdisError,
    ValidationError,
)
from .utils.logger import LogLevel, get_logger, set_log_level
from .utils.network_utils import is_valid_ip, is_valid_port


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")
    if not is_valid_port(port):
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return port


def _ipv4(value: str) -> str:
    if not is_valid_ip(value):
        raise argparse.ArgumentTypeError(f"invalid IPv4 address: {value}")
    return value


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value}")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="YAML configuration file; command line flags override its values"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging output"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )


def create_beacon_parser(prog: str = "ipdisserver") -> argparse.ArgumentParser:
    """
    Create and configure the beacon argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Answer with system info to ipdisscan broadcasts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ipdisserver                                  # Listen on 0.0.0.0:1901
  ipdisserver -p 2001 -a 192.168.1.10          # Custom port and address
  ipdisserver -s signatures.txt                # Accept the signatures listed in a file
  ipdisserver -f ./inventory/os -f ./inventory/disk   # Add inventory scripts output
        """
    )

    parser.add_argument(
        "--port", "-p",
        type=_port,
        help="Listening port. Default: 1901"
    )
    parser.add_argument(
        "--listening-addr", "-a",
        type=_ipv4,
        help="Listening address. Default: 0.0.0.0"
    )
    parser.add_argument(
        "--signatures-file", "-s",
        type=str,
        help="Path of a file with accepted signatures, one per line. UTF-8 characters are "
             "allowed. Each signature length must be 128 bytes at most. If not specified a "
             f"single signature is accepted: `{SIGNATURE_DEFAULT}`"
    )
    parser.add_argument(
        "--answer-file", "-f",
        dest="answer_files",
        action="append",
        metavar="ANSWER_FILE",
        help="Executable whose output is added to the answer. The output must be in the "
             "format `key0=value0\\nkey1=value1\\n...`. Repeat the option for each file."
    )
    _add_common_arguments(parser)
    return parser


def create_scanner_parser(prog: str = "ipdisscan") -> argparse.ArgumentParser:
    """
    Create and configure the scanner argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Search for active instances of ipdisserver and get system information.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ipdisscan                                    # Broadcast to 255.255.255.255:1901
  ipdisscan -b 192.168.1.255                   # Subnet broadcast address
  ipdisscan --signature new --signature old    # Query with several signatures
        """
    )

    parser.add_argument(
        "--port", "-p",
        type=_port,
        help="Scanner port, where answers are received. Default: 1902"
    )
    parser.add_argument(
        "--listening-addr", "-a",
        type=_ipv4,
        help="Scanner address. Default: 0.0.0.0"
    )
    parser.add_argument(
        "--broadcast-addr", "-b",
        type=_ipv4,
        help="Destination address of the queries. Default: 255.255.255.255"
    )
    parser.add_argument(
        "--target-port", "-t",
        type=_port,
        help="Beacon port. Default: 1901"
    )
    parser.add_argument(
        "--scan-period",
        type=_positive_float,
        help="Seconds between queries. Default: 1.0"
    )
    parser.add_argument(
        "--signatures-file", "-s",
        type=str,
        help="Path of a file with the signatures to send, one per line"
    )
    parser.add_argument(
        "--signature",
        dest="signatures",
        action="append",
        metavar="SIGNATURE",
        help=f"Signature to send. Repeat the option for each signature. Default: `{SIGNATURE_DEFAULT}`"
    )
    _add_common_arguments(parser)
    return parser


def configure_logging(args: argparse.Namespace, default: LogLevel) -> None:
    """Set the process-wide log level from the verbosity flags."""
    if args.verbose:
        set_log_level(LogLevel.DEBUG)
    elif args.quiet:
        set_log_level(LogLevel.ERROR)
    else:
        set_log_level(default)


class _App(ABC):
    """Shared lifecycle of the two command line tools."""

    name = "ipdis"

    def __init__(self):
        self.logger = get_logger(self.name)
        self.error_handler = ErrorHandler(self.logger)
        self.config_loader = ConfigLoader(self.logger)

    def run(self, args: argparse.Namespace) -> int:
        """
        Build the configuration and run until a fatal error.

        Returns:
            int: Exit code (non-zero, the loops never return normally)
        """
        try:
            self._serve(args)
            return 0
        except KeyboardInterrupt:
            self.logger.warning("Interrupted by user")
            return 130
        except IpdisError as e:
            context = e.error_context or ErrorContext(
                error_type=ErrorType.TRANSPORT_ERROR,
                severity=ErrorSeverity.CRITICAL,
                operation="run",
                component=self.name,
            )
            self.error_handler.handle_error(e, context)
            return 1

    @abstractmethod
    def _serve(self, args: argparse.Namespace) -> None:
        """Build the configuration and run the tool's loop."""
        pass


class BeaconApp(_App):
    """The ipdisserver command."""

    name = "ipdisserver"

    def build_config(self, args: argparse.Namespace) -> ServerConfig:
        config = self.config_loader.load_server_config(args.config)
        if args.port is not None:
            config.port = args.port
        if args.listening_addr is not None:
            config.listening_addr = args.listening_addr
        if args.signatures_file:
            config.signatures = parse_signatures_file(args.signatures_file, self.logger, config.recv_buffer)
            self.logger.info("Accepted signatures", signatures=[str(s) for s in config.signatures])
        if args.answer_files:
            config.inventory_files = [Path(f) for f in args.answer_files]
        return config

    def _serve(self, args: argparse.Namespace) -> None:
        config = self.build_config(args)
        self.logger.section("IP discovery beacon")
        self.logger.debug("Starting IP discovery beacon", config=config)
        beacon.run(config, logger=self.logger)


class ScannerApp(_App):
    """The ipdisscan command."""

    name = "ipdisscan"

    def build_config(self, args: argparse.Namespace) -> ScannerConfig:
        config = self.config_loader.load_scanner_config(args.config)
        if args.port is not None:
            config.port = args.port
        if args.listening_addr is not None:
            config.listening_addr = args.listening_addr
        if args.broadcast_addr is not None:
            config.broadcast_addr = args.broadcast_addr
        if args.target_port is not None:
            config.target_port = args.target_port
        if args.scan_period is not None:
            config.scan_period = args.scan_period
        signatures: List[Signature] = []
        if args.signatures_file:
            signatures.extend(parse_signatures_file(args.signatures_file, self.logger))
        if args.signatures:
            if not all(args.signatures):
                context = ErrorContext(
                    error_type=ErrorType.VALIDATION_ERROR,
                    severity=ErrorSeverity.HIGH,
                    operation="build_config",
                    component=self.name,
                )
                raise ValidationError("Empty signature given with --signature", context)
            signatures.extend(Signature.from_str(s) for s in args.signatures)
        if signatures:
            config.signatures = signatures
        return config

    def _serve(self, args: argparse.Namespace) -> None:
        config = self.build_config(args)
        self.logger.debug("Starting IP discovery scanner", config=config)
        ScanOrchestrator(config, logger=self.logger).run()


def beacon_main(argv: Optional[List[str]] = None) -> int:
    """Entry point of ipdisserver."""
    args = create_beacon_parser().parse_args(argv)
    configure_logging(args, LogLevel.INFO)
    return BeaconApp().run(args)


def scan_main(argv: Optional[List[str]] = None) -> int:
    """Entry point of ipdisscan."""
    args = create_scanner_parser().parse_args(argv)
    configure_logging(args, LogLevel.WARNING)
    return ScannerApp().run(args)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of ``python -m ipdis {beacon,scan} ...``.

    Returns:
        int: Exit code
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    commands = {"beacon": beacon_main, "scan": scan_main}
    if not argv or argv[0] not in commands:
        print("usage: python -m ipdis {beacon,scan} [options]", file=sys.stderr)
        return 2
    return commands[argv[0]](argv[1:])


if __name__ == "__main__":
    sys.exit(main())
