"""
Scanner side: broadcasts queries and aggregates beacon answers into a table.
"""

from .broadcaster import Broadcaster, broadcast, socket_setup
from .listener import Listener, listen
from .beacon_table import BeaconTable, aggregate
from .renderer import TableRenderer
from .orchestrator import ScanOrchestrator

__all__ = [
    'Broadcaster',
    'broadcast',
    'socket_setup',
    'Listener',
    'listen',
    'BeaconTable',
    'aggregate',
    'TableRenderer',
    'ScanOrchestrator'
]
