"""Structured outcome of a famgraph operation.

TreeService operations and ``GraphViewController.save_current_layout``
return a ServiceResult instead of raising, so a failed save can be shown
and retried without tearing down the view.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation failed: a stable ``code`` plus a readable message."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """``ok`` with an op-specific ``data`` payload, or ``error`` when not ok.

    ``warnings`` collects non-fatal problems (unknown nodes in a move,
    an empty graph on save) and is present in either case.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
