"""famgraph command line: global output/logging flags, then the command groups."""

from __future__ import annotations

from pathlib import Path

import click

from famgraph import __version__
from famgraph.commands import register_commands
from famgraph.commands._context import AppContext
from famgraph.config.settings import FamgraphSettings


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="famgraph")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print node ids or a status word only.")
@click.option("-v", "--verbose", is_flag=True, help="Show edge tables and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Read settings from this TOML file instead of famgraph.toml.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, **flags: bool) -> None:
    """Build family relationship graphs and lay them out."""
    settings = FamgraphSettings.from_cli(config_path=config_path, **flags)
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
