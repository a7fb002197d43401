"""Exception hierarchy for minireq.

All custom exceptions inherit from MinireqError. HTTP error statuses are
not exceptions: they are recorded as ``Outcome.FAILED`` on the exchange.
"""

from __future__ import annotations


class MinireqError(Exception):
    """Base exception for all minireq errors."""


class AllocationFailure(MinireqError, MemoryError):
    """Raised when an accumulator cannot grow or copy incoming data."""


class MalformedInput(MinireqError, ValueError):
    """Raised when a caller passes input the core cannot act on."""


class ExchangeStateError(MalformedInput):
    """Raised when an exchange is used outside its lifecycle."""


class TransportFailure(MinireqError):
    """Raised when the transport could not complete an exchange.

    Only raised on request, via ``raise_for_transport``; the engine itself
    returns the transport status.
    """

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"transport failed with status {int(status)}")


class ConfigError(MinireqError):
    """Raised when a configuration file is invalid."""
