"""
Wire codec for the discovery protocol.

Signatures and answers travel as raw UDP payloads without framing. Decoding
only wraps the received bytes; interpretation happens when a value is
rendered for humans, and rendering never fails whatever the bytes are.
"""

import json
from dataclasses import dataclass
from typing import Union

from ..utils.logger import get_logger

FALLBACK_INFO_KEY = "info"
INVALID_UTF8_PREFIX = "INVALID UTF-8:"

logger = get_logger(__name__)


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        raise TypeError("wire values are built from bytes, not str")
    return bytes(data)


@dataclass(frozen=True)
class Signature:
    """
    Shared identifier sent by the scanner. The beacon answers only if it is
    byte-exactly equal to one of its accepted signatures.
    """

    raw: bytes

    def __post_init__(self):
        object.__setattr__(self, "raw", _as_bytes(self.raw))

    @classmethod
    def from_str(cls, text: str) -> "Signature":
        return cls(text.encode("utf-8"))

    def __len__(self) -> int:
        return len(self.raw)

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Answer:
    """Payload returned by a beacon, conventionally UTF-8 JSON."""

    raw: bytes = b""

    def __post_init__(self):
        object.__setattr__(self, "raw", _as_bytes(self.raw))

    @classmethod
    def from_str(cls, text: str) -> "Answer":
        return cls(text.encode("utf-8"))

    def __len__(self) -> int:
        return len(self.raw)

    def __str__(self) -> str:
        return render(self)


def truncate(data: bytes, capacity: int) -> bytes:
    """Cut an inbound payload down to the receive-buffer capacity."""
    return bytes(data[:capacity])


def decode_signature(data: bytes) -> Signature:
    return Signature(data)


def decode_answer(data: bytes) -> Answer:
    return Answer(data)


def safe_format_bytes(data: bytes) -> str:
    """
    Render bytes as text.

    Valid UTF-8 is returned as-is, anything else as
    ``INVALID UTF-8: [1F, 20, FF]`` (two-digit uppercase hex per byte).
    """
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        hex_list = ", ".join(f"{byte:02X}" for byte in data)
        return f"{INVALID_UTF8_PREFIX} [{hex_list}]"


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


def _dumps(value) -> str:
    # numbers overflowing a double decode to inf, which has no JSON form
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def format_answer_bytes(data: bytes) -> str:
    """
    Render an answer payload as canonical JSON.

    Payloads that are not JSON are wrapped as ``{"info": <text>}``.
    """
    try:
        value = json.loads(bytes(data).decode("utf-8"), parse_constant=_reject_constant)
        return _dumps(value)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.debug("Answer payload is not JSON, using fallback", error=type(e).__name__)
        return _dumps({FALLBACK_INFO_KEY: safe_format_bytes(data)})


def render(value: Union[Signature, Answer, bytes, bytearray, memoryview]) -> str:
    """
    Human-readable rendering of a wire value.

    Plain byte strings are rendered as answers.
    """
    if isinstance(value, Signature):
        return safe_format_bytes(value.raw)
    if isinstance(value, Answer):
        return format_answer_bytes(value.raw)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return format_answer_bytes(bytes(value))
    raise TypeError(f"cannot render {type(value).__name__}")
