"""Tests for layout CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from famgraph.cli import cli
from tests.conftest import write_persons


def _json(runner: CliRunner, *args: str) -> dict:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def _positions(data: dict) -> dict[str, tuple[float, float]]:
    return {n["id"]: (n["x"], n["y"]) for n in data["data"]["nodes"]}


@pytest.mark.usefixtures("_isolated_root")
class TestLayoutShow:
    def test_computed_positions(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        people = str(write_persons(tmp_path / "people.json"))
        data = _json(cli_runner, "layout", "show", people)
        assert _positions(data)["1"] == (0, 0)
        assert data["data"]["stored_layout_applied"] is False

    def test_human(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        people = str(write_persons(tmp_path / "people.json"))
        result = cli_runner.invoke(cli, ["layout", "show", people, "--family-id", "7"])
        assert result.exit_code == 0
        assert "family-tree-layout-family-7" in result.output

    def test_left_to_right_from_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "famgraph.toml").write_text('[layout]\nrank_dir = "LR"\n')
        people = str(write_persons(tmp_path / "people.json"))
        positions = _positions(_json(cli_runner, "layout", "show", people))
        assert positions["2"][0] > positions["1"][0]


@pytest.mark.usefixtures("_isolated_root")
class TestLayoutSave:
    def test_save_then_show(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        people = str(write_persons(tmp_path / "people.json"))
        saved = _json(cli_runner, "layout", "save", people, "--move", "1", "10", "20")
        assert saved["data"]["count"] == 6
        assert (tmp_path / ".famgraph" / "layouts.db").exists()

        shown = _json(cli_runner, "layout", "show", people)
        assert _positions(shown)["1"] == (10, 20)
        assert shown["data"]["stored_layout_applied"] is True

        bypassed = _json(cli_runner, "layout", "show", people, "--no-stored")
        assert _positions(bypassed)["1"] == (0, 0)

    def test_family_layout_survives_new_people(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        people = tmp_path / "people.json"
        write_persons(people, [{"id": 1, "name": "Ada"}])
        _json(
            cli_runner, "layout", "save", str(people), "--family-id", "7", "--move", "1", "5", "5"
        )

        write_persons(people, [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Ben"}])
        shown = _json(cli_runner, "layout", "show", str(people), "--family-id", "7")
        assert _positions(shown)["1"] == (5, 5)

    def test_unknown_move_warns(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        people = str(write_persons(tmp_path / "people.json"))
        result = cli_runner.invoke(cli, ["layout", "save", people, "--move", "404", "1", "1"])
        assert result.exit_code == 0
        assert "WARNING: Unknown node '404' not moved" in result.output


@pytest.mark.usefixtures("_isolated_root")
class TestLayoutClear:
    def test_clear(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        people = str(write_persons(tmp_path / "people.json"))
        _json(cli_runner, "layout", "save", people, "--move", "1", "10", "20")
        cleared = _json(cli_runner, "layout", "clear", people)
        assert cleared["data"]["removed"] is True

        shown = _json(cli_runner, "layout", "show", people)
        assert _positions(shown)["1"] == (0, 0)

    def test_clear_family_without_people(self, cli_runner: CliRunner) -> None:
        cleared = _json(cli_runner, "layout", "clear", "--family-id", "7")
        assert cleared["data"] == {"layout_key": "family-tree-layout-family-7", "removed": False}
