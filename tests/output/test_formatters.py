"""Tests for the format_result dispatcher and OutputSettings."""

import json

from famgraph.output.formatters import OutputSettings, format_result
from famgraph.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="ERR", message=msg))


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResult:
    def test_json_mode_returns_valid_json(self) -> None:
        settings = OutputSettings(json_output=True)
        output = format_result(_ok("graph", node_count=2), settings=settings)
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["node_count"] == 2

    def test_json_mode_error(self) -> None:
        output = format_result(_err("save_layout"), settings=OutputSettings(json_output=True))
        assert json.loads(output)["error"]["code"] == "ERR"

    def test_quiet_mode(self) -> None:
        output = format_result(_ok("clear_layout"), settings=OutputSettings(quiet=True))
        assert output == "OK: clear_layout"

    def test_default_is_human(self) -> None:
        output = format_result(_ok("clear_layout", layout_key="k", removed=True))
        assert output.startswith("OK")
        assert "layout_key: k" in output
