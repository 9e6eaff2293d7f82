"""Tests for famgraph.toml discovery and loading."""

from pathlib import Path

import click
import pytest

from famgraph.config.discovery import CONFIG_ENV_VAR, find_config, read_toml


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_walks_up(self, tmp_path: Path) -> None:
        config = tmp_path / "famgraph.toml"
        config.write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == config.resolve()

    def test_not_found(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        explicit = tmp_path / "elsewhere.toml"
        explicit.write_text("")
        (tmp_path / "famgraph.toml").write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(explicit))
        assert find_config(tmp_path) == explicit

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None


class TestReadToml:
    def test_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "famgraph.toml"
        path.write_text("[layout]\nalign_partners = true\n[remote]\ntimeout = 2.5\n")
        assert read_toml(path) == {"layout": {"align_partners": True}, "remote": {"timeout": 2.5}}

    def test_invalid_toml_names_file(self, tmp_path: Path) -> None:
        path = tmp_path / "famgraph.toml"
        path.write_text("[layout\n")
        with pytest.raises(click.ClickException, match="famgraph.toml"):
            read_toml(path)
