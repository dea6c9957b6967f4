"""
Beacon side: answers scanner queries with a JSON description of the host.
"""

from .inventory import (
    InventorySource,
    InternalInventory,
    InventoryFile,
    parse_inventory_output,
    get_answer,
)
from .responder import BeaconResponder, run

__all__ = [
    'InventorySource',
    'InternalInventory',
    'InventoryFile',
    'parse_inventory_output',
    'get_answer',
    'BeaconResponder',
    'run'
]
