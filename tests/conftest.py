"""Shared pytest fixtures and test helpers for cdpbind tests.

The fixture protocol is a small two-half schema shaped like the real
browser and js protocol files:

- ``Page`` references ``Network`` across domains, has an enum, a
  fixed-length array alias, an experimental command, a deprecated
  command, and an event with a field named ``type``.
- ``Network`` has an empty-object type and a deprecated type whose
  fields inherit its warning.
- ``DOM`` (experimental) has a self-referencing ``Node``.
- ``Runtime`` is the js half, with an ``any`` field.
"""

from __future__ import annotations

import copy
import json
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest
from click.testing import CliRunner

from cdpbind.compiler.pipeline import CompiledProtocol, compile_protocol
from cdpbind.compiler.render import PackageRenderer
from cdpbind.config.settings import CdpBindSettings
from cdpbind.schema.loader import merge_definitions, parse_definition
from cdpbind.schema.model import Definition
from cdpbind.services.telemetry import disable_telemetry

VERSION = {"major": "1", "minor": "3"}

_BROWSER: dict[str, Any] = {
    "version": VERSION,
    "domains": [
        {
            "domain": "Page",
            "description": "Actions and events related to the inspected page.",
            "dependencies": ["Network"],
            "types": [
                {"id": "FrameId", "description": "Unique frame identifier.", "type": "string"},
                {
                    "id": "Frame",
                    "description": "Information about the Frame on the page.",
                    "type": "object",
                    "properties": [
                        {"name": "id", "$ref": "FrameId"},
                        {"name": "parentId", "$ref": "FrameId", "optional": True},
                        {"name": "loaderId", "$ref": "Network.LoaderId"},
                        {"name": "url", "type": "string"},
                    ],
                },
                {
                    "id": "TransitionType",
                    "description": "Transition type.",
                    "type": "string",
                    "enum": ["link", "typed", "address_bar", "auto_bookmark"],
                },
                {
                    "id": "Viewport",
                    "type": "object",
                    "properties": [
                        {"name": "x", "type": "number"},
                        {"name": "y", "type": "number"},
                        {"name": "scale", "type": "number"},
                    ],
                },
                {
                    "id": "Quad",
                    "description": "An array of quad vertices, x immediately followed by y.",
                    "type": "array",
                    "items": {"type": "number"},
                    "minItems": 8,
                    "maxItems": 8,
                },
            ],
            "commands": [
                {"name": "enable", "description": "Enables page domain notifications."},
                {
                    "name": "navigate",
                    "description": "Navigates current page to the given URL.",
                    "parameters": [
                        {
                            "name": "url",
                            "type": "string",
                            "description": "URL to navigate the page to.",
                        },
                        {"name": "transitionType", "$ref": "TransitionType", "optional": True},
                        {"name": "frameId", "$ref": "FrameId", "optional": True},
                    ],
                    "returns": [
                        {"name": "frameId", "$ref": "FrameId"},
                        {"name": "errorText", "type": "string", "optional": True},
                    ],
                },
                {
                    "name": "getLayoutMetrics",
                    "experimental": True,
                    "returns": [{"name": "cssViewport", "$ref": "Viewport"}],
                },
                {
                    "name": "clearDeviceMetricsOverride",
                    "description": "Deprecated, use Emulation.clearDeviceMetricsOverride instead.",
                    "deprecated": True,
                    "redirect": "Emulation",
                },
            ],
            "events": [
                {
                    "name": "loadEventFired",
                    "parameters": [{"name": "timestamp", "type": "number"}],
                },
                {
                    "name": "frameNavigated",
                    "description": "Fired once navigation of the frame has completed.",
                    "parameters": [
                        {"name": "frame", "$ref": "Frame"},
                        {
                            "name": "type",
                            "type": "string",
                            "enum": ["Navigation", "BackForwardCacheRestore"],
                        },
                    ],
                },
            ],
        },
        {
            "domain": "Network",
            "types": [
                {"id": "LoaderId", "type": "string"},
                {"id": "Headers", "description": "Request / response headers.", "type": "object"},
                {
                    "id": "ResourcePriority",
                    "type": "string",
                    "enum": ["VeryLow", "Low", "Medium", "High", "VeryHigh"],
                },
                {
                    "id": "CachedResource",
                    "description": "This is deprecated, avoid.",
                    "deprecated": True,
                    "type": "object",
                    "properties": [
                        {"name": "url", "type": "string", "deprecated": True},
                        {"name": "bodySize", "type": "number"},
                    ],
                },
            ],
            "commands": [
                {
                    "name": "setExtraHTTPHeaders",
                    "parameters": [{"name": "headers", "$ref": "Headers"}],
                    "handlers": ["browser", "renderer"],
                },
            ],
        },
        {
            "domain": "DOM",
            "description": "DOM inspection.",
            "experimental": True,
            "dependencies": ["Page"],
            "types": [
                {"id": "NodeId", "type": "integer"},
                {
                    "id": "Node",
                    "description": "DOM node.",
                    "type": "object",
                    "properties": [
                        {"name": "nodeId", "$ref": "NodeId"},
                        {"name": "nodeName", "type": "string"},
                        {
                            "name": "children",
                            "type": "array",
                            "items": {"$ref": "Node"},
                            "optional": True,
                        },
                        {
                            "name": "pseudoType",
                            "type": "string",
                            "optional": True,
                            "deprecated": True,
                        },
                    ],
                },
            ],
            "commands": [
                {"name": "getDocument", "returns": [{"name": "root", "$ref": "Node"}]},
                {
                    "name": "getContentQuads",
                    "parameters": [{"name": "nodeId", "$ref": "NodeId"}],
                    "returns": [{"name": "quads", "type": "array", "items": {"$ref": "Page.Quad"}}],
                },
            ],
        },
    ],
}

_JS: dict[str, Any] = {
    "version": VERSION,
    "domains": [
        {
            "domain": "Runtime",
            "types": [
                {"id": "RemoteObjectId", "type": "string"},
                {
                    "id": "RemoteObject",
                    "type": "object",
                    "properties": [
                        {
                            "name": "type",
                            "type": "string",
                            "enum": ["object", "function", "undefined"],
                        },
                        {"name": "value", "type": "any", "optional": True},
                        {"name": "objectId", "$ref": "RemoteObjectId", "optional": True},
                    ],
                },
            ],
            "commands": [
                {
                    "name": "evaluate",
                    "parameters": [{"name": "expression", "type": "string"}],
                    "returns": [{"name": "result", "$ref": "RemoteObject"}],
                },
            ],
            "events": [{"name": "executionContextsCleared"}],
        },
    ],
}


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def browser_schema() -> dict[str, Any]:
    """A fresh, mutable copy of the browser half."""
    return copy.deepcopy(_BROWSER)


def js_schema() -> dict[str, Any]:
    """A fresh, mutable copy of the js half."""
    return copy.deepcopy(_JS)


def write_protocol(root: Path, browser: dict[str, Any], js: dict[str, Any]) -> tuple[Path, Path]:
    """Write both halves under ``root/json/`` (the default config location)."""
    json_dir = root / "json"
    json_dir.mkdir(parents=True, exist_ok=True)
    browser_path = json_dir / "browser_protocol.json"
    js_path = json_dir / "js_protocol.json"
    browser_path.write_text(json.dumps(browser), encoding="utf-8")
    js_path.write_text(json.dumps(js), encoding="utf-8")
    return browser_path, js_path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """``-v`` enables telemetry process-wide; switch it off after each test."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def definition() -> Definition:
    """The merged fixture protocol."""
    return merge_definitions(parse_definition(browser_schema()), parse_definition(js_schema()))


@pytest.fixture
def compiled(definition: Definition) -> CompiledProtocol:
    return compile_protocol(definition, package="cdp")


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temp project with the fixture protocol at the default paths, as CWD."""
    monkeypatch.delenv("CDPBIND_CONFIG", raising=False)
    write_protocol(tmp_path, browser_schema(), js_schema())
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> CdpBindSettings:
    return CdpBindSettings.from_cli(project_root=project_root)


@pytest.fixture(scope="module")
def bindings(tmp_path_factory: pytest.TempPathFactory) -> Iterator[ModuleType]:
    """Generate the fixture protocol as package ``cdp_fixture`` and import it."""
    import importlib

    out = tmp_path_factory.mktemp("generated")
    definition = merge_definitions(
        parse_definition(browser_schema()), parse_definition(js_schema())
    )
    PackageRenderer(compile_protocol(definition, package="cdp_fixture")).write(out)

    sys.path.insert(0, str(out))
    try:
        yield importlib.import_module("cdp_fixture")
    finally:
        sys.path.remove(str(out))
        for name in [m for m in sys.modules if m == "cdp_fixture" or m.startswith("cdp_fixture.")]:
            del sys.modules[name]
