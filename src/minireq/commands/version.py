"""Version command - show version and the User-Agent sent with requests."""

import click
from rich.console import Console

from ..config import MinireqConfig
from ..environment import user_agent

console = Console()


@click.command()
@click.pass_context
def version(ctx):
    """Show version."""
    from minireq import __version__
    cfg = ctx.find_object(MinireqConfig) or MinireqConfig()
    console.print(f"minireq {__version__}")
    console.print(f"[dim]User-Agent: {user_agent(product=cfg.product)}[/dim]")
