"""Tests for the format_result dispatcher, quiet mode and the Rich renderers."""

import json

from chaosselect.output.console import create_console, get_output, style_for_phase
from chaosselect.output.formatters import OutputSettings, format_result
from chaosselect.output.renderers import render_quiet, render_result
from chaosselect.services.result import ServiceError, ServiceResult

_PODS = [
    {"namespace": "default", "name": "web-0", "phase": "Running", "node": "node-a"},
    {"namespace": "staging", "name": "web-0", "phase": "Pending", "node": None},
]


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail", code: str = "ERR") -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=msg, detail={"mode": "fixed"}),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        result = _ok("select_pods", count=2, pods=_PODS)
        data = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert data["ok"] is True
        assert data["op"] == "select_pods"
        assert data["data"]["pods"][1]["node"] is None

    def test_json_wins_over_quiet(self) -> None:
        result = _ok("select_pods", count=0, pods=[])
        output = format_result(result, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["data"]["count"] == 0

    def test_json_mode_error(self) -> None:
        output = format_result(_err(msg="Bad"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["message"] == "Bad"
        assert data["error"]["code"] == "ERR"


class TestQuiet:
    def test_pods_one_per_line(self) -> None:
        result = _ok("select_and_filter_pods", count=2, pods=_PODS)
        assert render_quiet(result) == "default/web-0\nstaging/web-0"

    def test_empty_pods(self) -> None:
        assert render_quiet(_ok("select_pods", count=0, pods=[])) == ""

    def test_meets(self) -> None:
        assert render_quiet(_ok("check_pod", meets=True)) == "true"
        assert render_quiet(_ok("check_pod", meets=False)) == "false"

    def test_other_ops(self) -> None:
        assert render_quiet(_ok("parse_expression", expression="a")) == "OK: parse_expression"

    def test_error(self) -> None:
        output = format_result(_err("select_pods", "boom"), settings=OutputSettings(quiet=True))
        assert output.startswith("ERROR: select_pods")
        assert "boom" in output


class TestRichRenderers:
    def test_selection_table(self) -> None:
        result = _ok(
            "select_and_filter_pods",
            mode="fixed",
            value="2",
            candidates=5,
            count=2,
            pods=_PODS,
        )
        output = render_result(result)
        assert "OK" in output
        assert "select_and_filter_pods" in output
        assert "fixed (2)" in output
        assert "candidates: 5" in output
        assert "web-0" in output
        assert "node-a" in output
        assert "Namespace" in output

    def test_selection_warnings(self) -> None:
        result = ServiceResult(
            ok=True,
            op="select_pods",
            data={"count": 0, "pods": []},
            warnings=["Pod default/ghost not found"],
        )
        output = render_result(result)
        assert "warning: Pod default/ghost not found" in output

    def test_check(self) -> None:
        output = render_result(_ok("check_pod", namespace="default", name="web-0", meets=False))
        assert "default/web-0" in output
        assert "does not meet selector" in output

    def test_parse_table(self) -> None:
        result = _ok(
            "parse_expression",
            expression="default,!kube-system",
            requirements=[
                {"key": "default", "operator": "EXISTS", "values": []},
                {"key": "kube-system", "operator": "DOES_NOT_EXIST", "values": []},
            ],
        )
        output = render_result(result)
        assert "DOES_NOT_EXIST" in output
        assert "kube-system" in output

    def test_parse_empty_expression(self) -> None:
        output = render_result(_ok("parse_expression", expression="", requirements=[]))
        assert "matches everything" in output

    def test_generic_fallback(self) -> None:
        output = render_result(_ok("unknown_op", items=[1, 2], flag=True))
        assert "items: [1,2]" in output
        assert "flag: True" in output

    def test_error_shows_code(self) -> None:
        output = render_result(_err("select_pods", "nope", code="PARSE_ERROR"))
        assert "ERROR" in output
        assert "[PARSE_ERROR]" in output
        assert "nope" in output
        assert "detail" not in output

    def test_verbose_error_shows_detail(self) -> None:
        output = render_result(_err("select_pods", "nope"), verbose=True)
        assert "detail:" in output
        assert "mode: fixed" in output

    def test_verbose_meta_tree(self) -> None:
        result = ServiceResult(
            ok=True,
            op="select_pods",
            data={"count": 0, "pods": []},
            meta={
                "telemetry": {
                    "name": "TargetingService.select_pods",
                    "duration_ms": 1.5,
                    "children": [
                        {"name": "list_pods", "duration_ms": 0.4, "annotations": {"pods": 5}}
                    ],
                }
            },
        )
        output = render_result(result, verbose=True)
        assert "meta:" in output
        assert "TargetingService.select_pods" in output
        assert "list_pods" in output
        assert "pods=5" in output
        assert "meta:" not in render_result(result)


class TestConsole:
    def test_create_and_read(self) -> None:
        console = create_console(no_color=True, width=40)
        console.print("hello")
        assert get_output(console) == "hello\n"

    def test_phase_styles(self) -> None:
        assert style_for_phase("Running") == "cs.phase.running"
        assert style_for_phase("Unknown") == "cs.phase.other"
