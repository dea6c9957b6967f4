"""
Core data models and protocol constants shared by the beacon and the scanner.
"""

from dataclasses import dataclass, field
from typing import Dict, Any

from .codec import Answer, Signature

SIGNATURE_DEFAULT = "ipdisbeacon"  # must fit in BEACON_RECV_BUFFER_DEFAULT
SERVER_PORT_DEFAULT = 1901
SCANNER_PORT_DEFAULT = 1902
BROADCAST_ADDR_DEFAULT = "255.255.255.255"
LISTENING_ADDR_DEFAULT = "0.0.0.0"

BEACON_RECV_BUFFER_DEFAULT = 128
SCANNER_RECV_BUFFER_DEFAULT = 1024
MAX_DATAGRAM_SIZE = 65535

RATE_LIMIT_WINDOW_DEFAULT = 10.0
SCAN_PERIOD_DEFAULT = 1.0
PRINT_PERIOD_DEFAULT = 1.0
INVENTORY_TIMEOUT_DEFAULT = 10.0


def default_signatures():
    return [Signature.from_str(SIGNATURE_DEFAULT)]


@dataclass(frozen=True)
class BeaconAnswer:
    """
    An answer as received by the scanner.

    Attributes:
        addr: IP address of the beacon that sent the datagram
        payload: Answer bytes, truncated to the scanner receive buffer
    """
    addr: str
    payload: Answer = field(default_factory=Answer)

    def __str__(self) -> str:
        return f"{self.addr}: {self.payload}"


@dataclass
class InventoryOutput:
    """
    Result of running one inventory source.

    Attributes:
        raw_output: Text produced by the source (stdout for files)
        output: Key-value pairs contributed to the answer
    """
    raw_output: str = ""
    output: Dict[str, Any] = field(default_factory=dict)
