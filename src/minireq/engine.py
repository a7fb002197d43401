"""Request orchestration: one GET/POST/PUT exchange against a transport."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Union

from .config import MinireqConfig
from .environment import Environment, user_agent
from .errors import ExchangeStateError, MalformedInput
from .exchange import Exchange, ExchangeState
from .transport import HttpxTransport, Option, Transport, TransportStatus, parse_header_line
from .urlencode import url_encode

logger = logging.getLogger(__name__)

METHODS = ("GET", "POST", "PUT")

# Sent when POST/PUT carry no body; otherwise some engines send an invalid length.
EMPTY_BODY_HEADER = "Content-Length: 0"

Body = Union[str, bytes]
TransportFactory = Callable[[], Transport]


class RequestEngine:
    """Performs requests and records the results on an Exchange.

    Each call opens a fresh transport from ``transport_factory`` and
    releases it before returning. The engine itself holds no per-request
    state, so one engine can serve any number of exchanges.
    """

    def __init__(
        self,
        transport_factory: Optional[TransportFactory] = None,
        environment: Optional[Environment] = None,
        config: Optional[MinireqConfig] = None,
    ) -> None:
        self._config = config or MinireqConfig()
        self._transport_factory = transport_factory or self._default_transport
        self._environment = environment

    def _default_transport(self) -> Transport:
        return HttpxTransport(
            timeout=self._config.timeout,
            verify_ssl=self._config.verify_ssl,
            proxy=self._config.proxy,
        )

    def perform(
        self,
        method: str,
        exchange: Exchange,
        url: str,
        body: Optional[Body] = None,
        extra_headers: Optional[Sequence[str]] = None,
    ) -> TransportStatus:
        """Send one request and record status, body and headers on ``exchange``.

        Args:
            method: GET, POST or PUT
            exchange: A ready exchange; reset it first when reusing
            url: Target URL
            body: Request body for POST/PUT
            extra_headers: Header lines ("Name: value") to send

        Returns:
            The transport status. OK means a response was received; check
            ``exchange.outcome`` for the HTTP-level result.

        Raises:
            MalformedInput: Unsupported method or malformed header line
            ExchangeStateError: ``exchange`` is not ready
        """
        method = method.upper()
        if method not in METHODS:
            raise MalformedInput(f"unsupported method: {method}")
        if exchange.state is not ExchangeState.READY:
            raise ExchangeStateError(
                f"cannot perform on an exchange that is {exchange.state.value}"
            )
        headers = list(extra_headers or [])
        for line in headers:
            parse_header_line(line)

        exchange.begin(url)
        transport = self._transport_factory()
        try:
            transport.configure(Option.URL, url)
            transport.configure(Option.BODY_SINK, exchange.body.append)
            transport.configure(Option.HEADER_SINK, exchange.received_headers.append_line)
            transport.configure(Option.TIMEOUT, self._config.timeout)

            outgoing: list[str] = []
            if method in ("POST", "PUT"):
                if body is not None:
                    transport.configure(Option.POST_FIELDS, body)
                else:
                    outgoing.append(EMPTY_BODY_HEADER)

            for line in headers:
                outgoing.append(line)
                exchange.sent_headers.append_line(line)
            if outgoing:
                transport.configure(Option.HTTP_HEADERS, outgoing)

            if method == "PUT":
                # Custom verb rather than an upload so any body can be attached.
                transport.configure(Option.CUSTOM_REQUEST, "PUT")
            elif method == "POST":
                transport.configure(Option.POST, True)

            transport.configure(
                Option.USER_AGENT, user_agent(self._environment, self._config.product)
            )

            logger.debug("%s %s (%d extra headers)", method, url, len(headers))
            status, code = transport.execute()
            if status != TransportStatus.OK:
                logger.warning("%s %s failed: %s", method, url, TransportStatus(status).name)
                return TransportStatus(status)

            exchange.complete(code)
            logger.info(
                "%s %s -> %d (%s, %d bytes)",
                method, url, code, exchange.outcome.value, exchange.body_size,
            )
            return TransportStatus.OK
        finally:
            transport.release()

    def get(self, exchange: Exchange, url: str) -> TransportStatus:
        return self.perform("GET", exchange, url)

    def post(self, exchange: Exchange, url: str, data: Optional[Body] = None) -> TransportStatus:
        return self.perform("POST", exchange, url, body=data)

    def put(self, exchange: Exchange, url: str, data: Optional[Body] = None) -> TransportStatus:
        return self.perform("PUT", exchange, url, body=data)

    def post_headers(
        self,
        exchange: Exchange,
        url: str,
        data: Optional[Body],
        headers: Sequence[str],
    ) -> TransportStatus:
        return self.perform("POST", exchange, url, body=data, extra_headers=headers)

    def put_headers(
        self,
        exchange: Exchange,
        url: str,
        data: Optional[Body],
        headers: Sequence[str],
    ) -> TransportStatus:
        return self.perform("PUT", exchange, url, body=data, extra_headers=headers)

    def url_encode(self, pairs: Sequence[str]) -> str:
        """URL-encode ``pairs`` with a short-lived transport."""
        transport = self._transport_factory()
        try:
            return url_encode(pairs, transport)
        finally:
            transport.release()
