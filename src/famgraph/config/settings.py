"""FamgraphSettings — CLI flags, environment and ``famgraph.toml`` in one object.

Priority, highest first:

1. keyword arguments (the CLI flags Click collected)
2. ``FAMGRAPH_*`` environment variables, ``__`` separating nested keys
   (``FAMGRAPH_REMOTE__BASE_URL``)
3. the discovered or explicit ``famgraph.toml``
4. defaults baked into :mod:`famgraph.config.models`
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from famgraph.config.discovery import find_config, read_toml
from famgraph.config.models import CacheConfig, LayoutConfig, RemoteConfig

logger = logging.getLogger(__name__)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over one TOML file. Unknown top-level keys are ignored."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        data = read_toml(toml_path) if toml_path and toml_path.is_file() else {}
        known = settings_cls.model_fields
        unknown = sorted(k for k in data if k not in known)
        if unknown:
            logger.warning("Ignoring unknown keys in %s: %s", toml_path, ", ".join(unknown))
        self._data = {k: v for k, v in data.items() if k in known}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


# The TOML path for the settings object under construction. pydantic-settings
# builds sources from a classmethod, so it cannot be passed as an argument.
_building = threading.local()


class FamgraphSettings(BaseSettings):
    """Resolved settings for one CLI invocation.

    Attributes:
        root: Directory holding ``famgraph.toml``, or the working directory
            when none was found. Relative cache paths resolve against it.
        config_path: The TOML file that was read, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FAMGRAPH_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    @property
    def cache_path(self) -> Path:
        """SQLite file of the local layout cache."""
        path = self.cache.path
        if path is None:
            return self.root / ".famgraph" / "layouts.db"
        return path if path.is_absolute() else self.root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, getattr(_building, "toml_path", None))
        return (init_settings, env_settings, toml)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | Path | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> FamgraphSettings:
        """Build settings for a CLI run.

        An explicit *config_path* that does not exist is treated as "no
        file". Without one, ``famgraph.toml`` is discovered from *root* (or
        the working directory), and its directory becomes the root.
        """
        if config_path:
            candidate = Path(config_path)
            toml_path = candidate if candidate.is_file() else None
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path else Path.cwd()

        _building.toml_path = toml_path
        try:
            return cls(root=root, config_path=toml_path, **cli_flags)
        finally:
            _building.toml_path = None
