"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, famgraph.toml only contains
overrides. Layout defaults match the canvas the renderer was tuned for.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

# --- famgraph.toml sections ---


class LayoutConfig(BaseModel):
    """[layout] section."""

    model_config = {"frozen": True}

    node_width: float = Field(default=180.0, gt=0)
    node_height: float = Field(default=80.0, gt=0)
    node_sep: float = Field(default=200.0, ge=0)
    rank_sep: float = Field(default=180.0, ge=0)
    rank_dir: Literal["TB", "LR"] = "TB"
    sweeps: int = Field(default=4, ge=0)
    align_partners: bool = False


class RemoteConfig(BaseModel):
    """[remote] section."""

    model_config = {"frozen": True}

    base_url: str | None = None
    token: str | None = None
    timeout: float = 10.0


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    path: Path | None = None  # default: {root}/.famgraph/layouts.db

