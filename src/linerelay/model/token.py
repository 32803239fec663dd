"""Token dataclass: the integer value relayed between agents."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from linerelay.errors import MalformedTokenError

# Signed 32-bit, network byte order
_WIRE_FORMAT = struct.Struct("!i")

TOKEN_SIZE = _WIRE_FORMAT.size  # 4 bytes on the wire
TOKEN_MIN = 0  # default lower bound of generated values
TOKEN_MAX = 100  # default upper bound of generated values
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class Token:
    """An immutable integer payload with no identity beyond its value.

    The protocol only ever generates values in [TOKEN_MIN, TOKEN_MAX], but the
    wire format itself accepts any signed 32-bit integer.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Token value must be an int, got {type(self.value).__name__}")
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"Token value {self.value} does not fit a signed 32-bit integer")

    def encode(self) -> bytes:
        """Encode as exactly TOKEN_SIZE bytes in network byte order."""
        return _WIRE_FORMAT.pack(self.value)

    @classmethod
    def decode(cls, payload: bytes) -> Token:
        """Decode a wire payload.

        Raises:
            MalformedTokenError: If the payload is not exactly TOKEN_SIZE bytes.
        """
        if len(payload) != TOKEN_SIZE:
            raise MalformedTokenError(
                f"Expected a {TOKEN_SIZE}-byte token, got {len(payload)} bytes",
                size=len(payload),
            )
        (value,) = _WIRE_FORMAT.unpack(payload)
        return cls(value)
