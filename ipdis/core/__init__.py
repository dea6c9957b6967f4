"""
Protocol core: wire codec, shared data models and the rate limiter.
"""

from .codec import (
    Signature,
    Answer,
    truncate,
    decode_signature,
    decode_answer,
    safe_format_bytes,
    render,
)
from .data_models import BeaconAnswer, InventoryOutput
from .rate_limiter import Clock, SystemClock, RateLimiter

__all__ = [
    'Signature',
    'Answer',
    'truncate',
    'decode_signature',
    'decode_answer',
    'safe_format_bytes',
    'render',
    'BeaconAnswer',
    'InventoryOutput',
    'Clock',
    'SystemClock',
    'RateLimiter'
]
