"""Config commands - inspect the settings requests are sent with."""

from __future__ import annotations

import sys
from dataclasses import asdict
from io import StringIO
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from ruamel.yaml import YAML

from ..config import (
    CONFIG_SEARCH_PATHS,
    MinireqConfig,
    find_config_path,
    get_default_config_yaml,
    load_config,
    validate_config,
)
from ..environment import user_agent

console = Console()


def _selected_path(ctx: click.Context) -> Optional[Path]:
    """Return the file given with the top-level --config, else the one found."""
    explicit = ctx.find_root().params.get("config_path")
    return Path(explicit) if explicit else find_config_path()


def _problems(path: Path) -> list[str]:
    if not path.exists():
        return [f"Config file not found: {path}"]
    return validate_config(path)


def _report(path: Path, problems: list[str]) -> None:
    console.print(f"[red]{len(problems)} problem(s) in[/red] {path}")
    for problem in problems:
        console.print(Text(f"  - {problem}"))


@click.group("config")
def config():
    """Inspect and create minireq.yaml.

    Use the top-level --config option to point at a file outside the
    search path.
    """


@config.command()
@click.argument(
    "target", required=False, default=CONFIG_SEARCH_PATHS[0],
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
def init(target: Path, force: bool):
    """Write a commented config template to TARGET (default: minireq.yaml)."""
    if target.exists() and not force:
        raise click.ClickException(f"{target} already exists; use --force to overwrite")
    target.write_text(get_default_config_yaml(), encoding="utf-8")
    console.print(f"[green]Wrote[/green] {target}")


@config.command()
@click.option("--yaml", "as_yaml", is_flag=True, help="Print as a minireq.yaml document")
@click.pass_context
def show(ctx: click.Context, as_yaml: bool):
    """Show the settings requests will be sent with.

    Top-level overrides such as --timeout or --proxy are included.
    """
    path = _selected_path(ctx)
    if path is not None:
        problems = _problems(path)
        if problems:
            _report(path, problems)
            sys.exit(1)

    cfg = ctx.find_object(MinireqConfig) or MinireqConfig()

    if as_yaml:
        yaml = YAML()
        yaml.default_flow_style = False
        buf = StringIO()
        yaml.dump({"minireq": asdict(cfg)}, buf)
        console.print(Syntax(buf.getvalue(), "yaml", theme="monokai"))
        return

    defaults = MinireqConfig()

    def origin(name: str) -> str:
        return "default" if getattr(cfg, name) == getattr(defaults, name) else "configured"

    table = Table(title="Request settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    table.add_row("Timeout", f"{cfg.timeout:g}s", origin("timeout"))
    table.add_row("TLS verification", "on" if cfg.verify_ssl else "off", origin("verify_ssl"))
    table.add_row("Proxy", Text(cfg.proxy or "direct"), origin("proxy"))
    table.add_row("User-Agent", Text(user_agent(product=cfg.product)), origin("product"))
    table.add_row("Log level", cfg.log_level, origin("log_level"))
    for line in cfg.extra_headers:
        table.add_row("Header", Text(line), "configured")
    console.print(table)

    console.print(f"[dim]Config file: {path or 'none, using defaults'}[/dim]")


@config.command()
@click.pass_context
def validate(ctx: click.Context):
    """Check the config file and summarize what requests will carry."""
    path = _selected_path(ctx)
    if path is None:
        console.print("[yellow]No config file found; requests use the defaults.[/yellow]")
        return

    problems = _problems(path)
    if problems:
        _report(path, problems)
        sys.exit(1)

    cfg = load_config(path)
    console.print(f"[green]OK[/green] {path}")
    console.print(
        f"[dim]{len(cfg.extra_headers)} extra header(s) per request, "
        f"User-Agent: {user_agent(product=cfg.product)}[/dim]"
    )


@config.command()
@click.pass_context
def path(ctx: click.Context):
    """Print the config file in effect."""
    found = _selected_path(ctx)
    if found is not None and found.exists():
        click.echo(str(found))
        return
    console.print(f"[dim]No config file; searched for {', '.join(CONFIG_SEARCH_PATHS)}[/dim]")
    sys.exit(1)
