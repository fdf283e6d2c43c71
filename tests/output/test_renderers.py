"""Tests for operation-specific renderers."""

from __future__ import annotations

from cdpbind.output.renderers import render_quiet, render_result
from cdpbind.services.result import ServiceError, ServiceResult

_REPLY = '{"id":4,"error":{"code":-32601,"message":"\'Foo.bar\' wasn\'t found"}}'


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=data)


def _protocol_failure() -> ServiceResult:
    return ServiceResult(
        ok=False,
        op="parse_message",
        error=ServiceError(
            code="PROTOCOL_ERROR",
            message="cdp error (code -32601): 'Foo.bar' wasn't found",
            detail={"id": 4, "error_code": -32601, "reply": _REPLY},
        ),
    )


class TestRenderCheck:
    def test_fields(self) -> None:
        output = render_result(_ok("check", version="1.3", domains=4, commands=8))
        assert output.startswith("OK  check")
        assert "version: 1.3" in output
        assert "domains: 4" in output
        assert "commands: 8" in output


class TestRenderDomains:
    _ROWS = [
        {
            "name": "Page",
            "module": "page",
            "commands": 4,
            "events": 2,
            "types": 5,
            "experimental": False,
            "deprecated": False,
            "dependencies": ["Network"],
        },
        {
            "name": "DOM",
            "module": "dom",
            "commands": 2,
            "events": 0,
            "types": 2,
            "experimental": True,
            "deprecated": True,
            "dependencies": ["Page"],
        },
    ]

    def test_table(self) -> None:
        output = render_result(_ok("domains", items=self._ROWS, count=2, version="1.3"))
        assert "Domain" in output
        assert "experimental deprecated" in output
        assert "2 domains (protocol 1.3)" in output
        assert "Depends on" not in output

    def test_verbose_dependencies(self) -> None:
        output = render_result(_ok("domains", items=self._ROWS, count=2), verbose=True)
        assert "Depends on" in output
        assert "Network" in output

    def test_quiet(self) -> None:
        result = _ok("domains", items=self._ROWS, count=2)
        assert render_quiet(result) == "Page\nDOM"


class TestRenderBorrows:
    def test_listing(self) -> None:
        result = _ok("borrows", borrowing=["dom.Node", "page.Frame"], owned=["page.Quad"])
        output = render_result(result)
        assert "page.Frame" in output
        assert "2 borrowing types" in output
        assert "page.Quad" not in output
        assert "1 owned types" in render_result(result, verbose=True)
        assert render_quiet(result) == "dom.Node\npage.Frame"

    def test_chain(self) -> None:
        result = _ok(
            "borrows",
            target="page.FrameNavigatedEvent",
            borrows=True,
            chain=["<string>", "page.Frame", "page.FrameNavigatedEvent"],
        )
        output = render_result(result)
        assert "page.FrameNavigatedEvent borrows via:" in output
        assert "\n    page.Frame" in output
        assert render_quiet(result) == "yes"

    def test_owned(self) -> None:
        result = _ok("borrows", target="page.Quad", borrows=False, chain=[])
        assert render_result(result) == "page.Quad owns all of its data"
        assert render_quiet(result) == "no"


class TestRenderDeprecated:
    def test_table(self) -> None:
        items = [
            {"path": "Network.type.CachedResource", "warning": "avoid", "own_warning": True},
            {"path": "DOM.type.Node.field.pseudoType", "warning": None, "own_warning": False},
        ]
        result = _ok("deprecated", items=items, count=2)
        output = render_result(result)
        assert "Network.type.CachedResource" in output
        assert "2 deprecated nodes" in output
        assert "inherited" in render_result(result, verbose=True)
        assert render_quiet(result).splitlines() == [
            "Network.type.CachedResource",
            "DOM.type.Node.field.pseudoType",
        ]


class TestRenderGenerate:
    def test_summary(self) -> None:
        result = _ok(
            "generate",
            package="cdp",
            version="1.3",
            output_dir="/tmp/out",
            files=["/tmp/out/cdp/page.py"],
            count=1,
        )
        output = render_result(result)
        assert "package: cdp" in output
        assert "output_dir: /tmp/out" in output
        assert "/tmp/out/cdp/page.py" not in output
        assert "/tmp/out/cdp/page.py" in render_result(result, verbose=True)
        assert render_quiet(result) == "/tmp/out/cdp/page.py"


class TestRenderMessage:
    def test_message(self) -> None:
        result = _ok("parse_message", id=0, method="Page.enable", params={})
        output = render_result(result)
        assert "method: Page.enable" in output
        assert "params: {}" in output
        assert render_quiet(result) == "Page.enable"

    def test_protocol_failure_shows_reply(self) -> None:
        output = render_result(_protocol_failure())
        assert output.startswith("ERROR  parse_message: cdp error (code -32601)")
        assert f"reply: {_REPLY}" in output
        assert "PROTOCOL_ERROR" not in output

    def test_protocol_failure_verbose(self) -> None:
        output = render_result(_protocol_failure(), verbose=True)
        assert "code: PROTOCOL_ERROR" in output
        assert "error_code: -32601" in output

    def test_quiet_failure_is_reply(self) -> None:
        assert render_quiet(_protocol_failure()) == _REPLY


class TestRenderGeneric:
    def test_unknown_op(self) -> None:
        output = render_result(_ok("something", answer=42))
        assert output.startswith("OK  something")
        assert "answer: 42" in output
        assert render_quiet(_ok("something")) == "OK: something"

    def test_error(self) -> None:
        result = ServiceResult(
            ok=False,
            op="check",
            error=ServiceError(code="VERSION_MISMATCH", message="versions differ"),
        )
        assert render_result(result) == "ERROR  check: versions differ"
        assert render_quiet(result) == "ERROR: check: versions differ"
