"""SchemaService: load, validate, and inspect the protocol schema.

Read-only: nothing here writes files. Backs ``cdpbind check`` and the
``cdpbind schema`` command group.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from cdpbind.compiler.reachability import explain, owned_types
from cdpbind.errors import CdpBindError
from cdpbind.schema.naming import QualifiedName, module_name
from cdpbind.services.base import BaseService, failure
from cdpbind.services.result import ServiceError, ServiceResult
from cdpbind.services.telemetry import traced


def _parse_qualified(text: str) -> QualifiedName | None:
    module, sep, name = text.partition(".")
    if not sep or not module or not name:
        return None
    return QualifiedName(module, name)


class SchemaService(BaseService):
    """Schema checks and inspection reports."""

    @traced
    def check(self, browser: Path | None = None, js: Path | None = None) -> ServiceResult:
        """Run every compile phase and report counts; write nothing."""
        try:
            compiled = self._compile(browser, js)
        except CdpBindError as exc:
            return failure("check", exc)

        definition = compiled.definition
        commands = sum(len(d.commands) for d in definition.domains)
        events = sum(len(d.events) for d in definition.domains)
        type_defs = sum(len(d.type_defs) for d in definition.domains)
        warnings = [
            f"domain '{d.name}' declares no commands, events, or types"
            for d in definition.domains
            if not (d.commands or d.events or d.type_defs)
        ]
        return ServiceResult(
            ok=True,
            op="check",
            data={
                "version": str(definition.version),
                "domains": len(definition.domains),
                "commands": commands,
                "events": events,
                "types": type_defs,
                "declarations": len(compiled.table),
                "borrowing": len(compiled.borrowing),
                "deprecated": len(compiled.metadata.deprecated_paths()),
            },
            warnings=warnings,
        )

    @traced
    def domains(self, browser: Path | None = None, js: Path | None = None) -> ServiceResult:
        """One row per domain, in schema order."""
        try:
            compiled = self._compile(browser, js)
        except CdpBindError as exc:
            return failure("domains", exc)

        rows: list[dict[str, Any]] = []
        for domain in compiled.definition.domains:
            meta = compiled.metadata[(domain.name,)]
            rows.append(
                {
                    "name": domain.name,
                    "module": module_name(domain.name),
                    "commands": len(domain.commands),
                    "events": len(domain.events),
                    "types": len(domain.type_defs),
                    "experimental": meta.experimental,
                    "deprecated": meta.deprecated,
                    "dependencies": list(domain.dependencies),
                }
            )
        return ServiceResult(
            ok=True,
            op="domains",
            data={"version": str(compiled.definition.version), "items": rows, "count": len(rows)},
        )

    @traced
    def borrows(
        self,
        target: str | None = None,
        browser: Path | None = None,
        js: Path | None = None,
    ) -> ServiceResult:
        """List borrowing types, or explain why *target* (``module.Name``) borrows."""
        try:
            compiled = self._compile(browser, js)
        except CdpBindError as exc:
            return failure("borrows", exc)

        if target is None:
            borrowing = sorted(str(name) for name in compiled.borrowing)
            owned = [str(name) for name in owned_types(compiled.graph)]
            return ServiceResult(
                ok=True,
                op="borrows",
                data={
                    "borrowing": borrowing,
                    "owned": owned,
                    "count": len(borrowing),
                },
            )

        qualified = _parse_qualified(target)
        if qualified is None or qualified not in compiled.graph:
            return ServiceResult(
                ok=False,
                op="borrows",
                error=ServiceError(
                    code="UNKNOWN_TYPE",
                    message=f"no generated type named '{target}'",
                    detail={"target": target},
                ),
            )
        chain = explain(compiled.graph, qualified)
        return ServiceResult(
            ok=True,
            op="borrows",
            data={
                "target": target,
                "borrows": chain is not None,
                "chain": [str(node) for node in chain or []],
            },
        )

    @traced
    def deprecated(self, browser: Path | None = None, js: Path | None = None) -> ServiceResult:
        """Every deprecated node with its effective warning."""
        try:
            compiled = self._compile(browser, js)
        except CdpBindError as exc:
            return failure("deprecated", exc)

        rows: list[dict[str, Any]] = []
        for path in compiled.metadata.deprecated_paths():
            status = compiled.metadata[path].deprecation
            rows.append(
                {
                    "path": ".".join(path),
                    "warning": status.warning,
                    "own_warning": status.has_own_warning,
                }
            )
        return ServiceResult(ok=True, op="deprecated", data={"items": rows, "count": len(rows)})
