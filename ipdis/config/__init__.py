"""
Configuration module for the beacon and the scanner.
"""

from .config_loader import ConfigLoader, ServerConfig, ScannerConfig, parse_signatures_file

__all__ = ['ConfigLoader', 'ServerConfig', 'ScannerConfig', 'parse_signatures_file']
