"""Transport collaborator: the engine that performs the actual network I/O.

The core talks to a transport through four calls: ``configure``,
``execute``, ``percent_encode`` and ``release``. ``HttpxTransport`` is the
shipped implementation; tests and embedders may supply their own.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum
from typing import Any, Callable, Optional, Protocol
from urllib.parse import quote

import httpx

from .errors import MalformedInput, TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Sinks receive a raw chunk and its length and return the count consumed.
Sink = Callable[[bytes, int], int]


class Option(Enum):
    """Named options a transport accepts through ``configure``."""

    URL = "url"
    BODY_SINK = "body_sink"
    HEADER_SINK = "header_sink"
    USER_AGENT = "user_agent"
    HTTP_HEADERS = "http_headers"
    POST = "post"
    CUSTOM_REQUEST = "custom_request"
    POST_FIELDS = "post_fields"
    TIMEOUT = "timeout"


class TransportStatus(IntEnum):
    """Transport-level result codes (numbered after the libcurl codes)."""

    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    WRITE_ERROR = 23
    OUT_OF_MEMORY = 27
    OPERATION_TIMEDOUT = 28
    SEND_ERROR = 55
    RECV_ERROR = 56


class Transport(Protocol):
    """Protocol for transport engines."""

    def configure(self, option: Option, value: Any) -> None:
        """Set a named option for the next ``execute``."""
        ...

    def execute(self) -> tuple[TransportStatus, int]:
        """Run the configured request; return status and HTTP response code."""
        ...

    def percent_encode(self, data: bytes) -> str:
        """Percent-encode ``data``."""
        ...

    def release(self) -> None:
        """Tear down per-call resources."""
        ...


def raise_for_transport(status: TransportStatus) -> None:
    """Raise TransportFailure unless ``status`` is OK."""
    if status != TransportStatus.OK:
        raise TransportFailure(status, f"transport failed: {TransportStatus(status).name}")


def percent_encode(data: bytes) -> str:
    """Escape every byte outside the RFC 3986 unreserved set."""
    return quote(data, safe="")


def parse_header_line(line: str) -> tuple[str, str]:
    """Split a ``"Name: value"`` header line into its name and value.

    ``"Name;"`` sends ``Name`` with an empty value. Only the whitespace
    between the colon and the value is dropped.

    Raises:
        MalformedInput: The line has no colon, or the name is empty or
            contains whitespace
    """
    name, sep, value = line.partition(":")
    if not sep and line.endswith(";"):
        name, sep, value = line[:-1], ";", ""
    if not sep or not name or any(c.isspace() for c in name):
        raise MalformedInput(f"header line must look like 'Name: value': {line!r}")
    return name, value.lstrip(" \t")


def _status_for(exc: Exception) -> TransportStatus:
    """Map an httpx exception to the closest transport status."""
    if isinstance(exc, httpx.UnsupportedProtocol):
        return TransportStatus.UNSUPPORTED_PROTOCOL
    if isinstance(exc, httpx.InvalidURL):
        return TransportStatus.URL_MALFORMAT
    if isinstance(exc, httpx.TimeoutException):
        return TransportStatus.OPERATION_TIMEDOUT
    if isinstance(exc, httpx.ConnectError):
        message = str(exc).lower()
        if "name or service not known" in message or "nodename nor servname" in message \
                or "getaddrinfo" in message or "name resolution" in message:
            return TransportStatus.COULDNT_RESOLVE_HOST
        return TransportStatus.COULDNT_CONNECT
    if isinstance(exc, (httpx.WriteError, httpx.LocalProtocolError)):
        return TransportStatus.SEND_ERROR
    return TransportStatus.RECV_ERROR


class HttpxTransport:
    """Transport backed by httpx.

    Feeds the header sink the status line, one raw line per header and the
    closing CRLF, the way a line-oriented HTTP engine reports them. The
    body sink receives each chunk as it arrives, with any Content-Encoding
    already undone, so the body is the identity payload. Redirects are not
    followed.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        proxy: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._proxy = proxy
        self._transport = transport
        self._options: dict[Option, Any] = {}
        self._client: Optional[httpx.Client] = None

    def configure(self, option: Option, value: Any) -> None:
        if not isinstance(option, Option):
            raise MalformedInput(f"unknown transport option: {option!r}")
        self._options[option] = value

    def _method(self) -> str:
        custom = self._options.get(Option.CUSTOM_REQUEST)
        if custom:
            return str(custom)
        if self._options.get(Option.POST):
            return "POST"
        return "GET"

    def _headers(self) -> list[tuple[str, str]]:
        headers = [parse_header_line(line) for line in self._options.get(Option.HTTP_HEADERS) or []]
        user_agent = self._options.get(Option.USER_AGENT)
        if user_agent:
            headers.append(("User-Agent", user_agent))
        return headers

    def _open_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._options.get(Option.TIMEOUT, self._timeout),
                verify=self._verify_ssl,
                proxy=self._proxy,
                transport=self._transport,
                follow_redirects=False,
            )
        return self._client

    def execute(self) -> tuple[TransportStatus, int]:
        url = self._options.get(Option.URL)
        if not url:
            return TransportStatus.URL_MALFORMAT, 0

        body_sink: Optional[Sink] = self._options.get(Option.BODY_SINK)
        header_sink: Optional[Sink] = self._options.get(Option.HEADER_SINK)
        method = self._method()
        content = self._options.get(Option.POST_FIELDS)
        if isinstance(content, str):
            content = content.encode("utf-8")

        try:
            client = self._open_client()
            with client.stream(method, url, headers=self._headers(), content=content) as response:
                if header_sink is not None:
                    status_line = (
                        f"{response.http_version} {response.status_code} "
                        f"{response.reason_phrase}\r\n"
                    ).encode("ascii", "replace")
                    header_sink(status_line, len(status_line))
                    for name, value in response.headers.raw:
                        line = name + b": " + value + b"\r\n"
                        header_sink(line, len(line))
                    header_sink(b"\r\n", 2)

                for chunk in response.iter_bytes():
                    if body_sink is not None:
                        body_sink(chunk, len(chunk))

                code = response.status_code
        except (httpx.TransportError, httpx.InvalidURL) as e:
            status = _status_for(e)
            logger.debug("%s %s failed: %s (%s)", method, url, e, status.name)
            return status, 0

        return TransportStatus.OK, code

    def percent_encode(self, data: bytes) -> str:
        return percent_encode(data)

    def release(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        self._options.clear()
