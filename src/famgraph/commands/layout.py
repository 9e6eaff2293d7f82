"""Command group: layout computation and saved positions."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from famgraph.commands._base import FamGroup, source_options
from famgraph.services.tree import PersonSource

if TYPE_CHECKING:
    from famgraph.commands._context import AppContext

_LAYOUT_EXAMPLES = """\
  famgraph layout show people.json
  famgraph layout show people.json --family-id 7 --no-stored
  famgraph layout save people.json --family-id 7 --move 3 400 120
  famgraph layout clear --family-id 7"""


@click.group(cls=FamGroup, examples=_LAYOUT_EXAMPLES)
@click.pass_obj
def layout(app: AppContext) -> None:
    """Compute, save and clear node positions."""


@layout.command(
    examples="""\
  famgraph layout show people.json
  famgraph layout show people.json --family-id 7
  famgraph --json layout show --remote --family-id 7 --no-stored"""
)
@source_options
@click.option(
    "--no-stored",
    is_flag=True,
    help="Ignore saved positions and show the computed layout.",
)
@click.pass_obj
def show(
    app: AppContext,
    persons_file: Path | None,
    family_id: int | None,
    remote: bool,
    no_stored: bool,
) -> None:
    """Show node positions: the computed layout merged with saved positions."""
    source = PersonSource(path=persons_file, remote=remote)
    app.emit(app.tree.layout(source, family_id=family_id, use_stored=not no_stored))


@layout.command(
    examples="""\
  famgraph layout save people.json
  famgraph layout save people.json --family-id 7 --move 3 400 120 --move 4 620 120"""
)
@source_options
@click.option(
    "--move",
    "moves",
    multiple=True,
    type=(str, float, float),
    metavar="ID X Y",
    help="Place node ID at (X, Y) before saving. Repeatable.",
)
@click.pass_obj
def save(
    app: AppContext,
    persons_file: Path | None,
    family_id: int | None,
    remote: bool,
    moves: tuple[tuple[str, float, float], ...],
) -> None:
    """Save the current arrangement, after applying any --move edits."""
    source = PersonSource(path=persons_file, remote=remote)
    app.emit(app.tree.save(source, family_id=family_id, moves=moves))


@layout.command(
    examples="""\
  famgraph layout clear --family-id 7
  famgraph layout clear people.json"""
)
@source_options
@click.pass_obj
def clear(
    app: AppContext,
    persons_file: Path | None,
    family_id: int | None,
    remote: bool,
) -> None:
    """Forget the locally cached layout for a family or person set."""
    source = PersonSource(path=persons_file, remote=remote)
    app.emit(app.tree.clear(source, family_id=family_id))
