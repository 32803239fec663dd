"""Error taxonomy for the relay protocol.

- ConfigurationError: fatal at setup, the system refuses to start.
- ProtocolViolationError: logged, the offending message is dropped.
- TransportError: logged, the pending send is abandoned without retry.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for all linerelay errors."""


class ConfigurationError(RelayError):
    """Invalid line length, timing, value range, or link directory."""


class ProtocolViolationError(RelayError):
    """A receipt the protocol cannot accept.

    Raised when the sender is not one of the receiver's configured neighbors.
    """

    def __init__(self, message: str, position: int | None = None, sender: int | None = None):
        super().__init__(message)
        self.position = position
        self.sender = sender


class MalformedTokenError(ProtocolViolationError):
    """A payload whose size is not exactly one encoded token."""

    def __init__(self, message: str, size: int):
        super().__init__(message)
        self.size = size


class TransportError(RelayError):
    """The transport could not carry a token to its destination."""

    def __init__(self, message: str, sender: int | None = None, dest: int | None = None):
        super().__init__(message)
        self.sender = sender
        self.dest = dest
