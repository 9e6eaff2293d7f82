"""Rich console for rendering results to a string.

Every render goes to a fresh StringIO-backed Console so renderers can
return text. Rich drops colour codes on its own when stdout is not a
terminal (pipes, CliRunner).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FAM_THEME = Theme(
    {
        "fam.ok": "bold green",
        "fam.error": "bold red",
        "fam.op": "bold cyan",
        "fam.key": "dim",
        "fam.id": "bold blue",
        "fam.label": "bold",
        "fam.coord": "magenta",
        # Edge colours follow the graph's edge styles.
        "fam.rel.parent": "#10b981",
        "fam.rel.sibling": "#6366f1",
        "fam.rel.spouse": "#ec4899",
    }
)


def create_console(*, no_color: bool = False, width: int = 120) -> Console:
    """A Console writing into its own StringIO buffer."""
    return Console(
        file=StringIO(), theme=FAM_THEME, no_color=no_color, highlight=False, width=width
    )


def get_output(console: Console) -> str:
    """Everything written to *console* so far."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_relation(relation_type: str) -> str:
    """Theme style for a relation type name, or "" when it has none."""
    style = f"fam.rel.{relation_type.lower()}"
    return style if style in FAM_THEME.styles else ""
