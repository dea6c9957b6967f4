"""
Per-source admission control for the beacon.

The beacon answers each source address at most once per window. The window
is coarse: the whole set of served addresses is cleared at once when it
expires, so addresses blocked at different times become eligible together.
"""

import time
from abc import ABC, abstractmethod
from typing import Hashable, Optional, Set

from .data_models import RATE_LIMIT_WINDOW_DEFAULT
from ..utils.logger import Logger, get_logger


class Clock(ABC):
    """Time source used by the rate limiter."""

    @abstractmethod
    def now(self) -> float:
        """Return the current time in seconds."""
        pass


class SystemClock(Clock):
    """Wall-clock time."""

    def now(self) -> float:
        return time.time()


class RateLimiter:
    """
    Remembers which source addresses were served in the current window.

    Attributes:
        served: Addresses already answered since the last reset
        next_reset: Timestamp at or after which the served set is cleared
        window: Window length in seconds
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        window: float = RATE_LIMIT_WINDOW_DEFAULT,
        logger: Optional[Logger] = None,
    ):
        self.clock = clock or SystemClock()
        self.window = window
        self.logger = logger or get_logger(__name__)
        self.served: Set[Hashable] = set()
        self.next_reset = self.clock.now()

    def reset_if_due(self) -> bool:
        """
        Clear the served set if the window has expired.

        Returns:
            True if a reset happened, False otherwise
        """
        now = self.clock.now()
        if now >= self.next_reset:
            self.served = set()
            self.next_reset = now + self.window
            self.logger.debug("Cleared served addresses", next_reset=self.next_reset)
            return True
        return False

    def check(self, addr: Hashable) -> bool:
        """
        Admit an address once per window.

        Returns:
            True if the address was not served yet in this window (it is now
            recorded as served), False if it must be rejected
        """
        self.reset_if_due()
        if addr in self.served:
            self.logger.debug("Address already served in this window", addr=addr)
            return False
        self.served.add(addr)
        return True
