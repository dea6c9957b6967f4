"""
Scanner broadcaster: periodically sends every configured signature as a
broadcast datagram. It never waits for replies; those land on the same
socket and are picked up by the listener.
"""

import socket
import time
from typing import Callable, Optional

from ..config.config_loader import ScannerConfig
from ..core.codec import Signature
from ..utils.error_handler import (
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
    TransportError,
)
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import format_address


def socket_setup(config: ScannerConfig) -> socket.socket:
    """
    Bind the scanner socket shared by the broadcaster and the listener.

    Raises:
        TransportError: If the socket cannot be bound or configured
    """
    address = (config.listening_addr, config.port)
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.bind(address)
    except OSError as e:
        sock.close()
        context = ErrorContext(
            error_type=ErrorType.TRANSPORT_ERROR,
            severity=ErrorSeverity.CRITICAL,
            operation="bind",
            component="Scanner",
            additional_info={"port": config.port},
        )
        raise TransportError(f"Cannot bind {format_address(address)}: {e}", context) from e
    return sock


class Broadcaster:
    """Sends queries every scan period, forever."""

    def __init__(
        self,
        config: ScannerConfig,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.sleep = sleep
        self.destination = (config.broadcast_addr, config.target_port)

    def run(self, sock: socket.socket) -> None:
        frequency = 1.0 / self.config.scan_period
        self.logger.info(
            "Scanning for beacons",
            destination=format_address(self.destination),
            frequency=f"{frequency:.2f}Hz",
        )
        while True:
            self.send_all(sock)
            self.sleep(self.config.scan_period)

    def send_all(self, sock: socket.socket) -> int:
        """
        Broadcast every signature once. Failures are reported, not raised.

        Returns:
            Number of signatures sent successfully
        """
        sent = 0
        for signature in self.config.signatures:
            try:
                self.send_single(sock, signature)
                sent += 1
            except TransportError as e:
                self.error_handler.handle_error(e, e.error_context)
        return sent

    def send_single(self, sock: socket.socket, signature: Signature) -> None:
        try:
            sock.sendto(signature.raw, self.destination)
        except OSError as e:
            context = ErrorContext(
                error_type=ErrorType.TRANSPORT_ERROR,
                severity=ErrorSeverity.MEDIUM,
                operation="broadcast",
                component="Broadcaster",
                additional_info={"port": self.config.target_port},
            )
            raise TransportError(
                f"Failed broadcasting signature to {format_address(self.destination)}: {e}", context
            ) from e
        self.logger.debug("Broadcasted", dest=format_address(self.destination), payload=signature)


def broadcast(config: ScannerConfig, sock: Optional[socket.socket] = None, logger: Optional[Logger] = None) -> None:
    """Broadcast forever from sock, or from a freshly bound scanner socket."""
    Broadcaster(config, logger=logger).run(sock or socket_setup(config))
