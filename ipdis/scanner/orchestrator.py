"""
Scan Orchestrator for the scanner.

Wires the scanner together: one shared UDP socket, a broadcaster thread, a
listener thread and the beacon table ticking on the calling thread. The
listener hands answers to the table over an unbounded queue. A failure in a
worker thread is re-raised on the next tick so the process stops.
"""

import queue
import socket
import threading
from typing import Callable, Optional

from ..config.config_loader import ScannerConfig
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import format_address
from .beacon_table import BeaconTable
from .broadcaster import Broadcaster, socket_setup
from .listener import Listener
from .renderer import TableRenderer


class ScanOrchestrator:
    """
    Runs the three scanner units until the process is terminated.

    Attributes:
        config: Scanner configuration
        channel: Listener to table handoff queue
        table: Last-write-wins beacon table
    """

    def __init__(
        self,
        config: ScannerConfig,
        logger: Optional[Logger] = None,
        renderer=None,
    ):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.renderer = renderer or TableRenderer()
        self.channel: "queue.Queue" = queue.Queue()
        self.table = BeaconTable(self.logger)
        self.socket: Optional[socket.socket] = None
        self._failure: Optional[Exception] = None
        self._threads = []

    def start(self) -> socket.socket:
        """Bind the scanner socket and start the broadcaster and listener threads."""
        self.socket = socket_setup(self.config)
        self.logger.info("Scanner socket ready", address=format_address(self.socket.getsockname()))

        listener = Listener(self.config, self.channel, self.logger)
        broadcaster = Broadcaster(self.config, self.logger)

        # the listener starts first so that no early answer is missed
        for name, target in (("listener", listener.run), ("broadcaster", broadcaster.run)):
            thread = threading.Thread(
                target=self._guarded,
                args=(name, target, self.socket),
                name=f"ipdisscan-{name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        return self.socket

    def _guarded(self, name: str, target: Callable, sock: socket.socket) -> None:
        try:
            target(sock)
        except Exception as e:
            self.logger.error(f"Scanner {name} stopped", exception=e)
            self._failure = e

    def check_health(self) -> None:
        """Re-raise the failure of a worker thread, if any."""
        if self._failure is not None:
            raise self._failure

    def run(self) -> None:
        """Scan forever. Only returns by raising the error that stopped a worker."""
        if self.socket is None:
            self.start()
        self.table.run(
            self.channel,
            self.renderer,
            print_period=self.config.print_period,
            health_check=self.check_health,
        )
