"""Tests for operation-specific Rich renderers."""

from __future__ import annotations

from typing import Any

from addonctl.output.console import style_for_state
from addonctl.output.renderers import render_quiet, render_result
from addonctl.services.result import ServiceError, ServiceResult


def _item(addon_id: str, **overrides: Any) -> dict[str, Any]:
    item = {
        "id": addon_id,
        "filename": f"/addons/{addon_id}.addon.py",
        "name": addon_id.title(),
        "author": "Jane",
        "description": "No description",
        "version": "1.0",
        "state": "started",
        "partial": False,
        "enabled": True,
    }
    item.update(overrides)
    return item


class TestRenderList:
    def test_table(self) -> None:
        result = ServiceResult(
            ok=True,
            op="list",
            data={"items": [_item("foo"), _item("bar", state="partial", enabled=False)]},
        )
        output = render_result(result)
        assert "OK" in output
        assert "foo" in output
        assert "partial" in output
        assert "yes" in output
        assert "no" in output
        assert "Author" not in output

    def test_verbose_adds_columns(self) -> None:
        result = ServiceResult(ok=True, op="list", data={"items": [_item("foo")]})
        output = render_result(result, verbose=True)
        assert "Author" in output
        assert "Jane" in output

    def test_empty(self) -> None:
        result = ServiceResult(ok=True, op="list", data={"items": []})
        assert "No addons found." in render_result(result)


class TestRenderAddon:
    def test_fields(self) -> None:
        result = ServiceResult(ok=True, op="enable", data=_item("foo"))
        output = render_result(result)
        assert "id: foo" in output
        assert "state: started" in output
        assert "enabled: True" in output
        assert "filename" not in output

    def test_verbose_shows_filename(self) -> None:
        result = ServiceResult(ok=True, op="reload", data=_item("foo"))
        assert "/addons/foo.addon.py" in render_result(result, verbose=True)


class TestRenderCheck:
    def test_counts(self) -> None:
        result = ServiceResult(ok=True, op="check", data={"loaded": 3, "error_count": 0})
        output = render_result(result)
        assert "loaded: 3" in output
        assert "error_count: 0" in output


class TestRenderError:
    def test_addon_error_detail(self) -> None:
        result = ServiceResult(
            ok=False,
            op="enable",
            error=ServiceError(
                code="HOOK",
                message="Boom: start() could not be fired.",
                detail={
                    "filename": "/addons/boom.addon.py",
                    "cause": {"message": "x", "stack": "Traceback: boom"},
                },
            ),
        )
        output = render_result(result)
        assert "ERROR" in output
        assert "Boom: start() could not be fired." in output
        assert "cause: x" in output
        assert "Traceback" not in output
        assert "Traceback: boom" in render_result(result, verbose=True)

    def test_error_list(self) -> None:
        result = ServiceResult(
            ok=False,
            op="check",
            error=ServiceError(
                code="ADDON_ERRORS",
                message="2 addon error(s) during load",
                detail={
                    "errors": [
                        {"name": "bad", "reason": "Could not be compiled.", "cause": {"message": "syntax"}},
                        {"name": "empty", "reason": "empty had no exports", "cause": {}},
                    ]
                },
            ),
        )
        output = render_result(result)
        assert "bad: Could not be compiled. syntax" in output
        assert "empty: empty had no exports" in output

    def test_quiet_error(self) -> None:
        result = ServiceResult(
            ok=False, op="enable", error=ServiceError(code="NOT_FOUND", message="missing")
        )
        assert "missing" in render_quiet(result)


class TestGeneric:
    def test_unknown_op(self) -> None:
        result = ServiceResult(ok=True, op="custom", data={"a": 1, "b": [1, 2]})
        output = render_result(result)
        assert "a: 1" in output
        assert "b: [1,2]" in output


class TestStyles:
    def test_style_for_state(self) -> None:
        assert style_for_state("started") == "addon.state.started"
        assert style_for_state("unloaded") == ""
