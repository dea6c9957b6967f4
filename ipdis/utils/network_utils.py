"""
Network utility functions for address validation and formatting.
"""

import ipaddress
from typing import Tuple


def is_valid_ip(ip_address: str) -> bool:
    """
    Check if a string represents a valid IPv4 address.

    Args:
        ip_address: String to validate as IPv4 address

    Returns:
        bool: True if valid IPv4 address, False otherwise
    """
    if not isinstance(ip_address, str):
        return False
    try:
        ipaddress.IPv4Address(ip_address)
        return True
    except (ipaddress.AddressValueError, TypeError):
        return False


def is_valid_port(port, allow_ephemeral: bool = True) -> bool:
    """
    Check if a value is a usable UDP port number.

    Args:
        port: Value to validate
        allow_ephemeral: Accept 0, which asks the OS for a free port

    Returns:
        bool: True if valid port, False otherwise
    """
    if isinstance(port, bool) or not isinstance(port, int):
        return False
    lower = 0 if allow_ephemeral else 1
    return lower <= port <= 65535


def format_address(address: Tuple) -> str:
    """Render a socket address tuple as host:port."""
    host, port = address[0], address[1]
    return f"{host}:{port}"
