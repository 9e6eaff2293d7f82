"""Subcommand modules for famgraph.

Provides register_commands() which uses deferred imports to keep
``famgraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from famgraph.commands.graph import graph
    from famgraph.commands.layout import layout

    cli.add_command(graph)
    cli.add_command(layout)
