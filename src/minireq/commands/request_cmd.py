"""Request commands - send GET/POST/PUT and show the exchange."""

from __future__ import annotations

import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..config import MinireqConfig
from ..engine import RequestEngine
from ..errors import MalformedInput
from ..exchange import Exchange, Outcome
from ..transport import TransportStatus, parse_header_line

console = Console()

# click itself exits with 2 on usage errors
EXIT_HTTP_FAILURE = 1
EXIT_TRANSPORT_FAILURE = 3

OUTCOME_COLORS = {
    Outcome.OK: "green",
    Outcome.FAILED: "red",
    Outcome.UNKNOWN: "dim",
}


def _run(
    method: str,
    url: str,
    data: Optional[str],
    headers: tuple[str, ...],
    include: bool,
) -> None:
    """Perform one request and print the result; exits non-zero on failure."""
    ctx = click.get_current_context()
    cfg = ctx.find_object(MinireqConfig) or MinireqConfig()
    engine = RequestEngine(config=cfg)

    with Exchange() as exchange:
        status = engine.perform(
            method,
            exchange,
            url,
            body=data,
            extra_headers=[*cfg.extra_headers, *headers],
        )

        if status != TransportStatus.OK:
            console.print(f"[red]Request failed:[/red] {status.name} ({int(status)})")
            sys.exit(EXIT_TRANSPORT_FAILURE)

        _display_exchange(exchange, include)

        if exchange.outcome is not Outcome.OK:
            sys.exit(EXIT_HTTP_FAILURE)


def _display_exchange(exchange: Exchange, include: bool) -> None:
    """Display status, optional headers and body."""
    color = OUTCOME_COLORS[exchange.outcome]
    console.print(
        f"[{color}]{exchange.status_code}[/{color}] "
        f"[dim]{exchange.outcome.value} - {exchange.body_size} bytes[/dim]"
    )

    if include:
        lines = [line.rstrip("\r\n") for line in exchange.received_headers.decoded()]
        if exchange.sent_headers.count():
            sent = [line.rstrip("\r\n") for line in exchange.sent_headers.decoded()]
            console.print(Panel(Text("\n".join(sent)), title="Sent headers", border_style="cyan"))
        console.print(Panel(Text("\n".join(lines)), title="Response headers", border_style="cyan"))

    if exchange.body_size:
        console.out(exchange.text, highlight=False)


def _check_headers(ctx, param, value: tuple[str, ...]) -> tuple[str, ...]:
    """Reject -H lines the engine would refuse, before anything is sent."""
    for line in value:
        try:
            parse_header_line(line)
        except MalformedInput as e:
            raise click.BadParameter(str(e), ctx=ctx, param=param) from e
    return value


def _request_options(func):
    func = click.option(
        "--include", "-i", is_flag=True, help="Show request and response headers"
    )(func)
    func = click.option(
        "--header", "-H", "headers", multiple=True, callback=_check_headers,
        help="Extra header ('Name: value' or 'Name;'), may be repeated",
    )(func)
    func = click.argument("url")(func)
    return func


@click.command("get")
@_request_options
def get(url: str, headers: tuple[str, ...], include: bool) -> None:
    """Send a GET request.

    \b
    Examples:
        minireq get https://example.com/
        minireq get https://api.example.com/items -H "Accept: application/json" -i
    """
    _run("GET", url, None, headers, include)


@click.command("post")
@_request_options
@click.option("--data", "-d", default=None, help="Request body (e.g. output of 'minireq encode')")
def post(url: str, headers: tuple[str, ...], include: bool, data: Optional[str]) -> None:
    """Send a POST request.

    Without --data an empty body is sent with Content-Length: 0.
    """
    _run("POST", url, data, headers, include)


@click.command("put")
@_request_options
@click.option("--data", "-d", default=None, help="Request body")
def put(url: str, headers: tuple[str, ...], include: bool, data: Optional[str]) -> None:
    """Send a PUT request.

    Without --data an empty body is sent with Content-Length: 0.
    """
    _run("PUT", url, data, headers, include)
