"""minireq CLI entry point."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from .commands import config, encode, get, post, put, version
from .config import MinireqConfig, load_config
from .errors import ConfigError

console = Console()


def setup_logging(level: str) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Config file path (minireq.yaml)")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL certificate verification")
@click.option("--proxy", default=None, help="HTTP proxy for requests (e.g., http://127.0.0.1:8080)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[str],
    timeout: Optional[float],
    no_verify_ssl: bool,
    proxy: Optional[str],
    verbose: bool,
) -> None:
    """minireq - minimal HTTP client.

    Sends GET/POST/PUT requests and reports status, headers and body.
    """
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        # config subcommands must still run to inspect a broken file
        if ctx.invoked_subcommand != "config":
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        cfg = MinireqConfig()

    if timeout is not None:
        cfg.timeout = timeout
    if no_verify_ssl:
        cfg.verify_ssl = False
    if proxy:
        cfg.proxy = proxy
    if verbose:
        cfg.log_level = "DEBUG"

    setup_logging(cfg.log_level)
    ctx.obj = cfg


main.add_command(get)
main.add_command(post)
main.add_command(put)
main.add_command(encode)
main.add_command(config)
main.add_command(version)


if __name__ == "__main__":
    main()
