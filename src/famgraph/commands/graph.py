"""Command group: relationship graph construction."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from famgraph.commands._base import FamGroup, source_options
from famgraph.services.tree import PersonSource

if TYPE_CHECKING:
    from famgraph.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  famgraph graph build people.json
  famgraph --json graph build people.json
  famgraph graph build --remote --family-id 7"""


@click.group(cls=FamGroup, examples=_GRAPH_EXAMPLES)
@click.pass_obj
def graph(app: AppContext) -> None:
    """Build the family relationship graph."""


@graph.command(
    examples="""\
  famgraph graph build people.json
  famgraph -v graph build people.json
  famgraph --json graph build --remote"""
)
@source_options
@click.pass_obj
def build(app: AppContext, persons_file: Path | None, family_id: int | None, remote: bool) -> None:
    """List the nodes and edges derived from PERSONS_FILE (no positions)."""
    source = PersonSource(path=persons_file, remote=remote)
    app.emit(app.tree.graph(source, family_id=family_id))
