"""BaseService: shared foundation for cdpbind services.

Every service receives the resolved :class:`CdpBindSettings` at
construction time. Services load and compile the protocol themselves,
and turn library errors into failed :class:`ServiceResult` objects.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cdpbind.compiler.pipeline import CompiledProtocol, compile_protocol
from cdpbind.errors import (
    CdpBindError,
    DuplicateDeclarationError,
    InvalidParamsError,
    RenderError,
    SchemaParseError,
    UnresolvedReferenceError,
    VersionMismatchError,
)
from cdpbind.schema.loader import load_protocol
from cdpbind.schema.model import Definition
from cdpbind.services.result import ServiceError, ServiceResult
from cdpbind.services.telemetry import trace_span

if TYPE_CHECKING:
    from cdpbind.config.settings import CdpBindSettings

logger = logging.getLogger(__name__)

# Most specific first.
_ERROR_CODES: tuple[tuple[type[CdpBindError], str], ...] = (
    (SchemaParseError, "SCHEMA_PARSE_ERROR"),
    (VersionMismatchError, "VERSION_MISMATCH"),
    (UnresolvedReferenceError, "UNRESOLVED_REFERENCE"),
    (DuplicateDeclarationError, "DUPLICATE_DECLARATION"),
    (RenderError, "RENDER_FAILED"),
    (InvalidParamsError, "INVALID_PARAMS"),
)


def error_code(exc: CdpBindError) -> str:
    for cls, code in _ERROR_CODES:
        if isinstance(exc, cls):
            return code
    return "CDPBIND_ERROR"


def failure(op: str, exc: CdpBindError, **detail: Any) -> ServiceResult:
    """Wrap a library error as a failed result for *op*."""
    for attr in ("source", "location", "module", "path"):
        value = getattr(exc, attr, None)
        if value is not None:
            detail.setdefault(attr, str(value))
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=error_code(exc), message=str(exc), detail=detail),
    )


class BaseService:
    """Base for service-layer classes.

    Usage::

        class SchemaService(BaseService):
            def check(self) -> ServiceResult:
                try:
                    compiled = self._compile()
                except CdpBindError as exc:
                    return failure("check", exc)
                ...
    """

    def __init__(self, settings: CdpBindSettings) -> None:
        self._settings = settings

    def _protocol_paths(
        self, browser: Path | None = None, js: Path | None = None
    ) -> tuple[Path, Path]:
        """Explicit paths win; otherwise the ``[protocol]`` config section."""
        cfg = self._settings.protocol
        return (
            self._settings.resolve(browser or cfg.browser),
            self._settings.resolve(js or cfg.js),
        )

    def _load(self, browser: Path | None = None, js: Path | None = None) -> Definition:
        browser_path, js_path = self._protocol_paths(browser, js)
        with trace_span("load") as span:
            definition = load_protocol(browser_path, js_path)
            if span:
                span.annotate("domains", len(definition.domains))
        logger.debug("Loaded protocol %s from %s + %s", definition.version, browser_path, js_path)
        return definition

    def _compile(
        self,
        browser: Path | None = None,
        js: Path | None = None,
        *,
        package: str | None = None,
    ) -> CompiledProtocol:
        definition = self._load(browser, js)
        with trace_span("compile") as span:
            compiled = compile_protocol(
                definition, package=package or self._settings.generate.package
            )
            if span:
                span.annotate("declarations", len(compiled.table))
                span.annotate("modules", len(compiled.table.modules()))
                span.annotate("borrowing", len(compiled.borrowing))
        return compiled
