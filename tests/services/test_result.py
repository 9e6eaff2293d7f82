"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from famgraph.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="layout", data={"node_count": 3})
        assert result.ok is True
        assert result.op == "layout"
        assert result.data == {"node_count": 3}
        assert result.warnings == []
        assert result.error is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="SAVE_FAILED", message="Remote unavailable")
        result = ServiceResult(ok=False, op="save_layout", error=error)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "SAVE_FAILED"

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="graph", data={"edge_count": 2}, warnings=["w"])
        parsed = json.loads(result.model_dump_json())
        assert parsed["data"]["edge_count"] == 2
        assert parsed["warnings"] == ["w"]
        assert parsed["error"] is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="graph")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_with_detail(self) -> None:
        error = ServiceError(
            code="SAVE_FAILED",
            message="Could not save",
            detail={"layout_key": "family-tree-layout-family-7", "retryable": True},
        )
        assert error.detail["retryable"] is True

    def test_default_detail(self) -> None:
        assert ServiceError(code="X", message="y").detail == {}
