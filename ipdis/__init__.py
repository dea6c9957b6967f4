"""
IP Discovery

A LAN discovery protocol pair: a beacon answering UDP broadcast queries with
a JSON description of its host, and a scanner collecting those answers.
"""

__version__ = "0.2.0"
__author__ = "IP Discovery Team"
