"""Click building blocks shared by every famgraph command.

``FamGroup`` and ``FamCommand`` take an ``examples=`` string and expose it
through an eager ``--examples`` flag, so ``--help`` stays short.
``source_options`` adds the person-source arguments common to the graph
and layout commands.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
    ctx.exit(0)


class _ExamplesMixin:
    """Adds an ``examples`` keyword and, when given, the ``--examples`` flag."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return
        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=_print_examples,
                help="Show usage examples and exit.",
            )
        )


class FamCommand(_ExamplesMixin, click.Command):
    """Command accepting ``examples=``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class FamGroup(_ExamplesMixin, click.Group):
    """Group accepting ``examples=``; its subcommands are FamCommands."""

    command_class = FamCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


def source_options[F: Callable[..., Any]](fn: F) -> F:
    """``[PERSONS_FILE] [--family-id N] [--remote]``."""
    decorators = (
        click.argument(
            "persons_file",
            required=False,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
        ),
        click.option(
            "--family-id",
            type=int,
            default=None,
            help="Family the saved layout belongs to (and whose people --remote fetches).",
        ),
        click.option(
            "--remote",
            is_flag=True,
            help="Fetch people from the configured family API instead of a file.",
        ),
    )
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn
