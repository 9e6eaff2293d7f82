"""AppContext — the object every command receives via ``@click.pass_obj``.

Built once by the root group from the resolved settings. It configures
logging, hands out the TreeService lazily, and owns the single place
where a ServiceResult turns into output and an exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from famgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from famgraph.config.settings import FamgraphSettings
    from famgraph.services.result import ServiceResult
    from famgraph.services.tree import TreeService


class AppContext:
    """Settings plus lazily created services for one CLI invocation."""

    def __init__(self, settings: FamgraphSettings) -> None:
        from famgraph.config.logging import configure_logging

        self.settings = settings
        self._tree: TreeService | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def output(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    @property
    def tree(self) -> TreeService:
        """TreeService, built on first use so ``--help`` never opens the cache."""
        if self._tree is None:
            from famgraph.services.tree import TreeService

            self._tree = TreeService(self.settings)
        return self._tree

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; exit 1 if it failed.

        Successful output goes to stdout and its warnings to stderr (JSON
        output already carries them). Failures go to stderr.
        """
        output = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(1)

        if output:
            click.echo(output)
        if not self.settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
