"""The request/response record and its reuse lifecycle."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .buffers import ByteAccumulator, LineAccumulator
from .errors import ExchangeStateError


class ExchangeState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    IN_FLIGHT = "in_flight"
    CLOSED = "closed"


class Outcome(Enum):
    UNKNOWN = "unknown"
    OK = "ok"
    FAILED = "failed"


def classify(status_code: int) -> Outcome:
    """Classify an HTTP status code.

    Codes of 400 and above are failures. So is 0, which means no response
    was received.
    """
    if status_code >= 400 or status_code == 0:
        return Outcome.FAILED
    return Outcome.OK


class Exchange:
    """One request/response cycle: status, body and headers.

    A record starts uninitialized. ``initialize()`` allocates its
    accumulators, ``reset()`` discards the previous cycle before reuse and
    ``close()`` releases everything. Each record tracks its own state, so
    reusing one record never affects another.

    Example:
        with Exchange() as exchange:
            engine.get(exchange, "https://example.com/")
            print(exchange.status_code, exchange.text)
    """

    def __init__(self) -> None:
        self._state = ExchangeState.UNINITIALIZED
        self._clear()

    def _clear(self) -> None:
        self._url: Optional[str] = None
        self._status_code = 0
        self._outcome = Outcome.UNKNOWN
        self._body: Optional[ByteAccumulator] = None
        self._sent_headers: Optional[LineAccumulator] = None
        self._received_headers: Optional[LineAccumulator] = None

    def _allocate(self) -> None:
        self._clear()
        self._body = ByteAccumulator()
        self._sent_headers = LineAccumulator()
        self._received_headers = LineAccumulator()
        self._state = ExchangeState.READY

    def _require(self, *states: ExchangeState) -> None:
        if self._state not in states:
            allowed = ", ".join(s.value for s in states)
            raise ExchangeStateError(
                f"exchange is {self._state.value}, expected {allowed}"
            )

    # --- Lifecycle ---

    def initialize(self) -> "Exchange":
        """Allocate empty accumulators and zero the status fields."""
        self._require(ExchangeState.UNINITIALIZED, ExchangeState.CLOSED)
        self._allocate()
        return self

    def reset(self) -> "Exchange":
        """Discard the previous cycle's data so the record can be reused.

        Also recovers a record left in flight by a transport failure.
        """
        self._require(ExchangeState.READY, ExchangeState.IN_FLIGHT)
        self._allocate()
        return self

    def close(self) -> None:
        """Release all owned storage. Closing twice is harmless."""
        self._clear()
        if self._state is not ExchangeState.UNINITIALIZED:
            self._state = ExchangeState.CLOSED

    def __enter__(self) -> "Exchange":
        """Make the record ready: initialize a fresh or closed one, reset one in flight."""
        if self._state is ExchangeState.IN_FLIGHT:
            self.reset()
        elif self._state is not ExchangeState.READY:
            self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Engine-facing transitions ---

    def begin(self, url: str) -> None:
        """Mark the record in flight for a request to ``url``."""
        self._require(ExchangeState.READY)
        self._url = url
        self._state = ExchangeState.IN_FLIGHT

    def complete(self, status_code: int) -> None:
        """Store the response code, classify it and return to ready."""
        self._require(ExchangeState.IN_FLIGHT)
        self._status_code = status_code
        self._outcome = classify(status_code)
        self._state = ExchangeState.READY

    # --- Accessors ---

    @property
    def state(self) -> ExchangeState:
        return self._state

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def ok(self) -> bool:
        return self._outcome is Outcome.OK

    @property
    def body(self) -> ByteAccumulator:
        self._require(ExchangeState.READY, ExchangeState.IN_FLIGHT)
        return self._body

    @property
    def body_size(self) -> int:
        return len(self._body) if self._body is not None else 0

    @property
    def text(self) -> str:
        return self.body.text()

    @property
    def sent_headers(self) -> LineAccumulator:
        self._require(ExchangeState.READY, ExchangeState.IN_FLIGHT)
        return self._sent_headers

    @property
    def received_headers(self) -> LineAccumulator:
        self._require(ExchangeState.READY, ExchangeState.IN_FLIGHT)
        return self._received_headers

    def __repr__(self) -> str:
        return (
            f"Exchange(state={self._state.value}, url={self._url!r}, "
            f"status_code={self._status_code}, outcome={self._outcome.value}, "
            f"body_size={self.body_size})"
        )
