"""Render a compiled protocol into a Python package on disk.

Output layout under ``<output_dir>/<package>/``::

    __init__.py    version, domain modules, COMMANDS / EVENTS, BORROWING_TYPES
    <domain>.py    one module per domain
    README.md      per-domain index of commands, events and types
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import TemplateError

from cdpbind.compiler import docs
from cdpbind.compiler.emitter import (
    BASE_COMMAND,
    BASE_EVENT,
    AliasDecl,
    Declaration,
    EnumDecl,
    RecordDecl,
)
from cdpbind.compiler.pipeline import CompiledProtocol
from cdpbind.compiler.templates import build_template_environment
from cdpbind.errors import RenderError
from cdpbind.schema.naming import method_class_name, module_name, pascal_case

logger = logging.getLogger(__name__)

TEMPLATE_GROUP = "python"


@dataclass(frozen=True)
class RenderedFile:
    path: Path  # relative to the output directory
    content: str


def _kind_of(decl: Declaration) -> str:
    match decl:
        case EnumDecl():
            return "enum"
        case RecordDecl():
            return "record"
        case AliasDecl():
            return "alias"


class PackageRenderer:
    """Turn a :class:`CompiledProtocol` into source files."""

    def __init__(self, compiled: CompiledProtocol, *, template_dir: Path | None = None) -> None:
        self._compiled = compiled
        self._env = build_template_environment(TEMPLATE_GROUP, template_dir=template_dir)

    @property
    def package(self) -> str:
        return self._compiled.package

    def render(self) -> list[RenderedFile]:
        files = [self._render_module(module) for module in self._compiled.table.modules()]
        files.append(self._render_init())
        files.append(self._render_readme())
        for rendered in files:
            if rendered.path.suffix == ".py":
                _check_syntax(rendered)
        return files

    def write(self, output_dir: Path) -> list[Path]:
        """Render and write every file; return the written paths."""
        written: list[Path] = []
        for rendered in self.render():
            target = output_dir / rendered.path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(rendered.content, encoding="utf-8")
            written.append(target)
        logger.info("Wrote %d files to %s", len(written), output_dir / self.package)
        return written

    # --- Files ---

    def _render_module(self, module: str) -> RenderedFile:
        table = self._compiled.table
        info = table.module_info(module)
        decls = table.in_module(module)
        module_doc = docs.docstring(info.meta, info.domain.description)
        head = f"The {info.domain.name} domain."
        content = self._render_template(
            "domain.py.j2",
            module_doc=f"{head}\n\n{module_doc}" if module_doc else head,
            protocol_version=str(self._compiled.definition.version),
            imports=sorted(info.imports),
            decls=[(_kind_of(decl), decl) for decl in decls],
            borrowing=[decl.name for decl in decls if decl.borrows],
        )
        return RenderedFile(Path(self.package) / f"{module}.py", content)

    def _render_init(self) -> RenderedFile:
        table = self._compiled.table
        content = self._render_template(
            "package_init.py.j2",
            protocol_version=str(self._compiled.definition.version),
            modules=table.modules(),
            commands=table.requests(BASE_COMMAND),
            events=table.requests(BASE_EVENT),
            borrowing=table.borrowing(),
        )
        return RenderedFile(Path(self.package) / "__init__.py", content)

    def _render_readme(self) -> RenderedFile:
        content = self._render_template(
            "README.md.j2",
            package=self.package,
            protocol_version=str(self._compiled.definition.version),
            sections=self._index_sections(),
        )
        return RenderedFile(Path(self.package) / "README.md", content)

    def _index_sections(self) -> list[dict[str, Any]]:
        metadata = self._compiled.metadata
        sections: list[dict[str, Any]] = []
        for domain in self._compiled.definition.domains:
            module = module_name(domain.name)
            link = f"{module}.py"
            meta = metadata[(domain.name,)]
            badges = " **Experimental**" if meta.experimental else ""
            if meta.deprecated:
                badges += " **[Deprecated]**"

            commands = [
                docs.index_entry(
                    method_class_name(cmd.name, "command"),
                    link,
                    metadata[(domain.name, "command", cmd.name)],
                    cmd.description,
                )
                for cmd in domain.commands
            ]
            events = [
                docs.index_entry(
                    method_class_name(evt.name, "event"),
                    link,
                    metadata[(domain.name, "event", evt.name)],
                    evt.description,
                )
                for evt in domain.events
            ]
            types = [
                docs.index_entry(
                    pascal_case(td.name),
                    link,
                    metadata[(domain.name, "type", td.name)],
                    td.description,
                )
                for td in domain.type_defs
            ]
            sections.append(
                {
                    "title": domain.name,
                    "module": module,
                    "badges": badges,
                    "description": domain.description,
                    "groups": [("Commands", commands), ("Events", events), ("Types", types)],
                }
            )
        return sections

    def _render_template(self, name: str, **context: Any) -> str:
        try:
            return self._env.get_template(name).render(**context)
        except TemplateError as exc:
            raise RenderError(name, str(exc), reason="template failed") from exc


def _check_syntax(rendered: RenderedFile) -> None:
    try:
        ast.parse(rendered.content, filename=str(rendered.path))
    except SyntaxError as exc:
        raise RenderError(str(rendered.path), f"line {exc.lineno}: {exc.msg}") from exc
