"""Pytest fixtures for minireq tests."""

from __future__ import annotations

from typing import Any, Sequence

import httpx
import pytest

from minireq.engine import RequestEngine
from minireq.exchange import Exchange
from minireq.transport import Option, TransportStatus, percent_encode


class FixedEnvironment:
    """Environment with a known OS name and release."""

    def operating_system_name(self) -> str:
        return "TestOS"

    def operating_system_release(self) -> str:
        return "1.2.3"


class ScriptedTransport:
    """In-memory transport that replays a scripted response through the sinks."""

    def __init__(
        self,
        status_code: int = 200,
        body_chunks: Sequence[bytes] = (),
        header_lines: Sequence[bytes] = (
            b"HTTP/1.1 200 OK\r\n",
            b"Content-Type: text/plain\r\n",
            b"\r\n",
        ),
        status: TransportStatus = TransportStatus.OK,
    ) -> None:
        self.status_code = status_code
        self.body_chunks = list(body_chunks)
        self.header_lines = list(header_lines)
        self.status = status
        self.options: dict[Option, Any] = {}
        self.executed = False
        self.released = False

    def configure(self, option: Option, value: Any) -> None:
        self.options[option] = value

    def execute(self) -> tuple[TransportStatus, int]:
        self.executed = True
        if self.status != TransportStatus.OK:
            return self.status, 0

        header_sink = self.options.get(Option.HEADER_SINK)
        body_sink = self.options.get(Option.BODY_SINK)
        for line in self.header_lines:
            header_sink(line, len(line))
        for chunk in self.body_chunks:
            body_sink(chunk, len(chunk))
        return TransportStatus.OK, self.status_code

    def percent_encode(self, data: bytes) -> str:
        return percent_encode(data)

    def release(self) -> None:
        self.released = True


class ChunkStream(httpx.SyncByteStream):
    """Response stream that yields the given chunks one by one."""

    def __init__(self, chunks: Sequence[bytes]) -> None:
        self._chunks = list(chunks)

    def __iter__(self):
        yield from self._chunks


@pytest.fixture
def environment():
    return FixedEnvironment()


@pytest.fixture
def scripted(environment):
    """Build an engine whose transports replay the given script.

    Returns a factory ``(engine, transports)``; every transport the engine
    opens is appended to ``transports``.
    """

    def _make(**script):
        transports: list[ScriptedTransport] = []

        def factory() -> ScriptedTransport:
            transport = ScriptedTransport(**script)
            transports.append(transport)
            return transport

        return RequestEngine(transport_factory=factory, environment=environment), transports

    return _make


@pytest.fixture
def exchange():
    """A ready exchange, closed after the test."""
    ex = Exchange().initialize()
    yield ex
    ex.close()
