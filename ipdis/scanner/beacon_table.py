"""
Beacon table: the scanner's last-write-wins view of every beacon heard.

Answers queued by the listener are drained without blocking on each render
tick and applied in the order drained, so updates for one address keep their
receipt order. Entries are never removed.
"""

import queue
import time
from typing import Callable, Dict, Optional, Tuple

from ..core.data_models import PRINT_PERIOD_DEFAULT, BeaconAnswer
from ..utils.logger import Logger, get_logger


class BeaconTable:
    """Map of beacon address to its most recently drained answer."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)
        self._beacons: Dict[str, BeaconAnswer] = {}

    def __len__(self) -> int:
        return len(self._beacons)

    def __contains__(self, addr: str) -> bool:
        return addr in self._beacons

    def get(self, addr: str) -> Optional[BeaconAnswer]:
        return self._beacons.get(addr)

    def apply(self, beacon: BeaconAnswer) -> None:
        if beacon.addr not in self._beacons:
            self.logger.info("New beacon", addr=beacon.addr)
        self._beacons[beacon.addr] = beacon

    def update(self, source) -> int:
        """
        Drain everything currently queued in source, without blocking.

        Returns:
            Number of answers applied
        """
        drained = 0
        while True:
            try:
                beacon = source.get_nowait()
            except queue.Empty:
                return drained
            self.logger.debug("Updating beacons", beacon=beacon)
            self.apply(beacon)
            drained += 1

    def snapshot(self) -> Tuple[BeaconAnswer, ...]:
        """Read-only view of the table, in first-seen order."""
        return tuple(self._beacons.values())

    def run(
        self,
        source,
        renderer,
        print_period: float = PRINT_PERIOD_DEFAULT,
        health_check: Optional[Callable[[], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Drain, render, sleep; forever.

        Args:
            source: Queue filled by the listener
            renderer: Object with a render(snapshot) method
            print_period: Seconds between ticks
            health_check: Called every tick, raises to stop the loop
            sleep: Sleep function
        """
        self.logger.debug("Printing beacons", period=print_period)
        while True:
            self.update(source)
            if health_check is not None:
                health_check()
            renderer.render(self.snapshot())
            sleep(print_period)


def aggregate(source, table: Optional[BeaconTable] = None) -> Tuple[BeaconAnswer, ...]:
    """Drain source into table (a new one by default) and return the snapshot."""
    table = table if table is not None else BeaconTable()
    table.update(source)
    return table.snapshot()
