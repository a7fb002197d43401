"""Encode command - build URL-encoded key/value strings."""

from __future__ import annotations

import sys

import click
from rich.console import Console

from ..config import MinireqConfig
from ..engine import RequestEngine
from ..errors import MalformedInput
from ..urlencode import build_query

console = Console()


@click.command("encode")
@click.argument("pairs", nargs=-1)
@click.option("--raw", is_flag=True, help="Print the query before percent-encoding")
@click.pass_context
def encode(ctx: click.Context, pairs: tuple[str, ...], raw: bool) -> None:
    """URL-encode KEY VALUE pairs.

    \b
    Examples:
        minireq encode name alice page 2
        minireq encode --raw q "hello world"
    """
    try:
        if raw:
            result = build_query(pairs)
        else:
            engine = RequestEngine(config=ctx.find_object(MinireqConfig))
            result = engine.url_encode(pairs)
    except MalformedInput as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.out(result, highlight=False)
