"""
Scanner listener: turns every datagram arriving on the scanner socket into
a BeaconAnswer and hands it to the aggregator.

No signature is checked on this path; whatever reaches the scanner socket
is treated as an answer.
"""

import socket
from typing import Optional

from ..config.config_loader import ScannerConfig
from ..core.codec import decode_answer, truncate
from ..core.data_models import MAX_DATAGRAM_SIZE, BeaconAnswer
from ..utils.error_handler import ErrorContext, ErrorSeverity, ErrorType, TransportError
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import format_address
from .broadcaster import socket_setup


class Listener:
    """
    Receive loop of the scanner.

    Attributes:
        config: Scanner configuration
        sink: Handoff channel, anything with a non-blocking put_nowait()
    """

    def __init__(self, config: ScannerConfig, sink, logger: Optional[Logger] = None):
        self.config = config
        self.sink = sink
        self.logger = logger or get_logger(__name__)

    def run(self, sock: socket.socket) -> None:
        """Listen forever. Only returns by raising TransportError."""
        self.logger.info("Listening for beacon answers", address=format_address(sock.getsockname()))
        while True:
            self.serve_single(sock)

    def serve_single(self, sock: socket.socket) -> BeaconAnswer:
        beacon_answer = self.receive(sock)
        self.logger.debug("Putting in queue", addr=beacon_answer.addr, payload=beacon_answer.payload)
        self.sink.put_nowait(beacon_answer)
        return beacon_answer

    def receive(self, sock: socket.socket) -> BeaconAnswer:
        try:
            data, source = sock.recvfrom(MAX_DATAGRAM_SIZE)
        except OSError as e:
            context = ErrorContext(
                error_type=ErrorType.TRANSPORT_ERROR,
                severity=ErrorSeverity.CRITICAL,
                operation="receive",
                component="Listener",
                additional_info={"port": self.config.port},
            )
            raise TransportError(f"Receive failed: {e}", context) from e
        self.logger.debug("Datagram received", length=len(data), source=format_address(source))
        return BeaconAnswer(
            addr=source[0],
            payload=decode_answer(truncate(data, self.config.recv_buffer)),
        )


def listen(config: ScannerConfig, sink, sock: Optional[socket.socket] = None, logger: Optional[Logger] = None) -> None:
    """Listen forever on sock, or on a freshly bound scanner socket."""
    Listener(config, sink, logger=logger).run(sock or socket_setup(config))
