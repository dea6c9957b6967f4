"""
Beacon responder: answers scanner queries carrying an accepted signature.

One datagram is handled at a time. A query is truncated to the receive
buffer, compared byte-exactly with the accepted signatures, checked against
the rate limiter, and answered with the host inventory. Mismatches and
rate-limited queries are dropped without any reply. Socket failures raise
TransportError and end the loop.
"""

import socket
from typing import Callable, Optional, Tuple

from ..config.config_loader import ServerConfig
from ..core.codec import Answer, Signature, decode_signature, truncate
from ..core.data_models import MAX_DATAGRAM_SIZE
from ..core.rate_limiter import Clock, RateLimiter
from ..utils.error_handler import ErrorContext, ErrorSeverity, ErrorType, TransportError
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import format_address
from .inventory import get_answer


def _transport_error(message: str, operation: str, port: int, error: OSError) -> TransportError:
    context = ErrorContext(
        error_type=ErrorType.TRANSPORT_ERROR,
        severity=ErrorSeverity.CRITICAL,
        operation=operation,
        component="BeaconResponder",
        additional_info={"port": port},
    )
    return TransportError(f"{message}: {error}", context)


class BeaconResponder:
    """
    Receive/validate/respond loop of the beacon.

    Attributes:
        config: Beacon configuration
        rate_limiter: Per-source admission control
        answer_factory: Callable producing the answer sent to scanners
    """

    def __init__(
        self,
        config: ServerConfig,
        logger: Optional[Logger] = None,
        clock: Optional[Clock] = None,
        answer_factory: Optional[Callable[[], Answer]] = None,
    ):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.rate_limiter = RateLimiter(clock, config.rate_limit_window, self.logger)
        self.answer_factory = answer_factory or self._default_answer
        self.accepted = frozenset(config.signatures)
        self.socket: Optional[socket.socket] = None

    def _default_answer(self) -> Answer:
        return get_answer(
            self.config.inventory_files,
            timeout=self.config.inventory_timeout,
            logger=self.logger,
        )

    def bind(self) -> socket.socket:
        """Open the UDP socket on the configured address and port."""
        address = (self.config.listening_addr, self.config.port)
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(address)
        except OSError as e:
            sock.close()
            raise _transport_error(
                f"Cannot bind {format_address(address)}", "bind", self.config.port, e
            ) from e
        self.socket = sock
        self.logger.success("Listening for scanner requests", address=format_address(sock.getsockname()))
        return sock

    def run(self) -> None:
        """Serve forever. Only returns by raising TransportError."""
        sock = self.socket or self.bind()
        if not self.accepted:
            self.logger.warning("No accepted signatures configured, no query will be answered")
        while True:
            self.rate_limiter.reset_if_due()
            self.serve_single(sock)

    def serve_single(self, sock: socket.socket) -> Optional[Answer]:
        """
        Receive one datagram and answer it if it is an admitted query.

        Returns:
            The answer sent, None if the datagram was dropped
        """
        data, source = self._receive(sock)
        answer = self.handle_datagram(data, source)
        if answer is not None:
            self._respond(sock, source, answer)
            self.logger.info("Answered", addr=format_address(source), answer=answer)
        return answer

    def handle_datagram(self, data: bytes, source: Tuple) -> Optional[Answer]:
        """
        Decide whether a query is answered and build the answer.

        Args:
            data: Raw datagram payload
            source: Sender socket address

        Returns:
            The answer to send, None to drop the query silently
        """
        received = decode_signature(truncate(data, self.config.recv_buffer))
        if not self.is_signature_valid(received):
            self.logger.debug("Bad signature received, not answering", addr=format_address(source), received=received)
            return None
        if not self.rate_limiter.check(source):
            self.logger.debug("Rate limited, not answering", addr=format_address(source))
            return None
        return self.answer_factory()

    def is_signature_valid(self, received: Signature) -> bool:
        return received in self.accepted

    def _receive(self, sock: socket.socket) -> Tuple[bytes, Tuple]:
        try:
            data, source = sock.recvfrom(MAX_DATAGRAM_SIZE)
        except OSError as e:
            raise _transport_error("Receive failed", "receive", self.config.port, e) from e
        self.logger.debug("Datagram received", length=len(data), source=format_address(source))
        return data, source

    def _respond(self, sock: socket.socket, addr: Tuple, answer: Answer) -> None:
        try:
            sock.sendto(answer.raw, addr)
        except OSError as e:
            raise _transport_error(f"Send to {format_address(addr)} failed", "send", self.config.port, e) from e


def run(config: ServerConfig, logger: Optional[Logger] = None) -> None:
    """Run the beacon; never returns except by raising TransportError."""
    BeaconResponder(config, logger=logger).run()
