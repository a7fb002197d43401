"""minireq - minimal HTTP client layer built around reusable exchanges."""

__version__ = "0.1.0"

from .buffers import ByteAccumulator, LineAccumulator
from .engine import RequestEngine
from .environment import PlatformEnvironment, user_agent
from .errors import (
    AllocationFailure,
    ConfigError,
    ExchangeStateError,
    MalformedInput,
    MinireqError,
    TransportFailure,
)
from .exchange import Exchange, ExchangeState, Outcome
from .transport import HttpxTransport, Option, TransportStatus, raise_for_transport
from .urlencode import build_query, url_encode

__all__ = [
    "__version__",
    "ByteAccumulator",
    "LineAccumulator",
    "RequestEngine",
    "PlatformEnvironment",
    "user_agent",
    "AllocationFailure",
    "ConfigError",
    "ExchangeStateError",
    "MalformedInput",
    "MinireqError",
    "TransportFailure",
    "raise_for_transport",
    "Exchange",
    "ExchangeState",
    "Outcome",
    "HttpxTransport",
    "Option",
    "TransportStatus",
    "build_query",
    "url_encode",
]
