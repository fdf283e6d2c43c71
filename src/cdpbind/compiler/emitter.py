"""Schema model -> flat declaration table.

Every generated named type becomes one declaration stored in a
:class:`DeclarationTable` keyed by ``(module, name)``. References between
declarations are by name only, so forward and self references need no
special ordering. Nested inline types are inserted before the record
that uses them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from cdpbind.compiler import docs
from cdpbind.compiler.resolver import ReferenceResolver
from cdpbind.errors import DuplicateDeclarationError
from cdpbind.runtime.models import CommandRequest, CommandResponse, EventRequest
from cdpbind.schema.deprecation import DeprecationIndex, NodeMeta, NodePath
from cdpbind.schema.model import (
    AnyType,
    ArrayType,
    BooleanType,
    Definition,
    Domain,
    EnumType,
    Field,
    IntegerType,
    Method,
    NumberType,
    ObjectType,
    RefType,
    SchemaType,
    StringType,
    TypeDef,
)
from cdpbind.schema.naming import (
    QualifiedName,
    enum_member_names,
    method_class_name,
    module_name,
    pascal_case,
    response_class_name,
    snake_case,
)

logger = logging.getLogger(__name__)

# Public attributes of the generated bases (pydantic's own plus
# to_params, event_name, ...). A field with one of these names would
# replace it on the class.
_BASE_ATTRIBUTES = frozenset(
    name
    for base in (CommandRequest, CommandResponse, EventRequest)
    for name in dir(base)
    if not name.startswith("_")
)

# Builtins used in generated annotations.
_ANNOTATION_NAMES = frozenset({"bool", "float", "int", "list", "str"})

BASE_MODEL = "ProtocolModel"
BASE_COMMAND = "CommandRequest"
BASE_RESPONSE = "CommandResponse"
BASE_EVENT = "EventRequest"


# --- Declarations ---


@dataclass(frozen=True)
class FieldDecl:
    py_name: str
    wire_name: str
    annotation: str
    optional: bool = False
    boxed: bool = False
    doc: str = ""
    deprecated: str | None = None
    borrows: bool = False

    @property
    def default_expr(self) -> str:
        """Right-hand side of the field assignment, ``""`` when none is needed."""
        args: list[str] = []
        if self.optional:
            args.append("default=None")
        if self.py_name != self.wire_name:
            args.append(f"alias={self.wire_name!r}")
        if self.deprecated is not None:
            args.append(f"deprecated={self.deprecated!r}")
        if not args:
            return ""
        if args == ["default=None"]:
            return " = None"
        return f" = _pd.Field({', '.join(args)})"


@dataclass(frozen=True)
class EnumDecl:
    name: str
    values: tuple[str, ...]
    members: tuple[str, ...]
    doc: str = ""
    deprecated: str | None = None
    borrows: bool = False

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return list(zip(self.members, self.values, strict=True))


@dataclass(frozen=True)
class RecordDecl:
    name: str
    fields: tuple[FieldDecl, ...]
    base: str = BASE_MODEL
    doc: str = ""
    deprecated: str | None = None
    borrows: bool = False
    # Wire method name for request classes.
    method_name: str | None = None
    # For responses: the request class they answer.
    link: str | None = None


@dataclass(frozen=True)
class AliasDecl:
    name: str
    annotation: str
    doc: str = ""
    deprecated: str | None = None
    borrows: bool = False


type Declaration = EnumDecl | RecordDecl | AliasDecl


@dataclass
class ModuleInfo:
    """Per-module data the renderer needs besides the declarations."""

    domain: Domain
    meta: NodeMeta
    imports: set[str] = field(default_factory=set)


class DeclarationTable:
    """Flat, insertion-ordered table of every generated declaration."""

    def __init__(self) -> None:
        self._decls: dict[QualifiedName, Declaration] = {}
        self._modules: dict[str, ModuleInfo] = {}

    def open_module(self, module: str, domain: Domain, meta: NodeMeta) -> ModuleInfo:
        info = ModuleInfo(domain=domain, meta=meta)
        self._modules[module] = info
        return info

    def add(self, module: str, decl: Declaration) -> QualifiedName:
        key = QualifiedName(module, decl.name)
        if key in self._decls:
            raise DuplicateDeclarationError(module, decl.name)
        self._decls[key] = decl
        return key

    def get(self, key: QualifiedName) -> Declaration | None:
        return self._decls.get(key)

    def modules(self) -> list[str]:
        return list(self._modules)

    def module_info(self, module: str) -> ModuleInfo:
        return self._modules[module]

    def in_module(self, module: str) -> list[Declaration]:
        return [decl for key, decl in self._decls.items() if key.module == module]

    def requests(self, base: str) -> list[QualifiedName]:
        return [
            key
            for key, decl in self._decls.items()
            if isinstance(decl, RecordDecl) and decl.base == base
        ]

    def borrowing(self) -> list[QualifiedName]:
        return [key for key, decl in self._decls.items() if decl.borrows]

    def __iter__(self) -> Iterator[tuple[QualifiedName, Declaration]]:
        return iter(self._decls.items())

    def __len__(self) -> int:
        return len(self._decls)

    def __contains__(self, key: object) -> bool:
        return key in self._decls


# --- Emitter ---


@dataclass(frozen=True)
class _Scope:
    """Where a type expression is being generated."""

    domain: Domain
    module: str
    info: ModuleInfo


@dataclass(frozen=True)
class _Expr:
    text: str
    borrows: bool = False
    boxed: bool = False


class TypeEmitter:
    """Build the declaration table for a whole definition."""

    def __init__(
        self,
        definition: Definition,
        resolver: ReferenceResolver,
        borrowing: frozenset[QualifiedName],
        metadata: DeprecationIndex,
        *,
        package: str = "cdp",
    ) -> None:
        self._definition = definition
        self._resolver = resolver
        self._borrowing = borrowing
        self._meta = metadata
        self._package = package
        self._table = DeclarationTable()

    def emit(self) -> DeclarationTable:
        for domain in self._definition.domains:
            self._emit_domain(domain)
        logger.debug("Emitted %d declarations", len(self._table))
        return self._table

    def _emit_domain(self, domain: Domain) -> None:
        module = module_name(domain.name)
        info = self._table.open_module(module, domain, self._meta[(domain.name,)])
        scope = _Scope(domain, module, info)
        for type_def in domain.type_defs:
            self._emit_type_def(scope, type_def)
        for command in domain.commands:
            self._emit_method(scope, "command", command)
        for event in domain.events:
            self._emit_method(scope, "event", event)

    # --- Named types ---

    def _emit_type_def(self, scope: _Scope, type_def: TypeDef) -> None:
        path: NodePath = (scope.domain.name, "type", type_def.name)
        meta = self._meta[path]
        name = pascal_case(type_def.name)
        borrows = QualifiedName(scope.module, name) in self._borrowing
        doc = docs.docstring(meta, type_def.description)
        deprecated = docs.deprecation_message(meta.deprecation)

        decl: Declaration
        match type_def.ty:
            case EnumType(values=values):
                decl = EnumDecl(name, values, enum_member_names(values), doc, deprecated)
            case ObjectType(fields=fields) if fields:
                decl = RecordDecl(
                    name,
                    self._fields(scope, name, fields, (*path, "field")),
                    doc=doc,
                    deprecated=deprecated,
                    borrows=borrows,
                )
            case ObjectType():
                decl = AliasDecl(name, "_models.Empty", doc, deprecated)
            case ty:
                expr = self._type_expr(scope, name, None, ty, path, meta, type_def.description)
                decl = AliasDecl(name, expr.text, doc, deprecated, borrows)
        self._table.add(scope.module, decl)

    def _emit_method(self, scope: _Scope, kind: str, method: Method) -> None:
        path: NodePath = (scope.domain.name, kind, method.name)
        meta = self._meta[path]
        qualified = scope.domain.qualified(method)
        request = method_class_name(method.name, kind)
        response = response_class_name(method.name) if kind == "command" else None
        note = docs.method_note(
            self._package,
            scope.module,
            qualified,
            kind,
            request,
            response,
            handlers=method.handlers,
            redirect=method.redirect,
        )
        deprecated = docs.deprecation_message(meta.deprecation)

        self._table.add(
            scope.module,
            RecordDecl(
                request,
                self._fields(scope, request, method.parameters, (*path, "param")),
                base=BASE_COMMAND if kind == "command" else BASE_EVENT,
                doc=docs.docstring(meta, method.description, note),
                deprecated=deprecated,
                borrows=QualifiedName(scope.module, request) in self._borrowing,
                method_name=qualified,
            ),
        )
        if response is None:
            return
        self._table.add(
            scope.module,
            RecordDecl(
                response,
                self._fields(scope, response, method.returns, (*path, "return")),
                base=BASE_RESPONSE,
                doc=f"Response to `{qualified}`.",
                deprecated=deprecated,
                borrows=QualifiedName(scope.module, response) in self._borrowing,
                link=request,
            ),
        )

    # --- Fields and type expressions ---

    def _fields(
        self,
        scope: _Scope,
        owner: str,
        fields: tuple[Field, ...],
        parent: NodePath,
    ) -> tuple[FieldDecl, ...]:
        decls: list[FieldDecl] = []
        seen: set[str] = set()
        for item in fields:
            decl = self._field(scope, owner, item, parent)
            if decl.py_name in seen:
                raise DuplicateDeclarationError(scope.module, f"{owner}.{decl.py_name}")
            seen.add(decl.py_name)
            decls.append(decl)
        return tuple(decls)

    def _field(self, scope: _Scope, owner: str, item: Field, parent: NodePath) -> FieldDecl:
        path = (*parent, item.name)
        meta = self._meta[path]
        expr = self._type_expr(scope, owner, item.name, item.ty, path, meta, item.description)
        annotation = f"{expr.text} | None" if item.optional else expr.text
        return FieldDecl(
            py_name=member_name(item.name),
            wire_name=item.name,
            annotation=annotation,
            optional=item.optional,
            boxed=expr.boxed,
            doc=docs.docstring(meta, item.description),
            deprecated=docs.deprecation_message(meta.deprecation),
            borrows=expr.borrows,
        )

    def _type_expr(
        self,
        scope: _Scope,
        owner: str,
        field_name: str | None,
        ty: SchemaType,
        path: NodePath,
        meta: NodeMeta,
        description: str | None,
    ) -> _Expr:
        match ty:
            case RefType(target=target):
                resolved = self._resolver.resolve(
                    scope.domain.name, target, location=f"{scope.module}.{owner}"
                )
                borrows = resolved in self._borrowing
                if resolved.module == scope.module:
                    return _Expr(resolved.name, borrows, boxed=resolved.name == owner)
                scope.info.imports.add(resolved.module)
                return _Expr(f"_{resolved.module}.{resolved.name}", borrows)
            case BooleanType():
                return _Expr("bool")
            case IntegerType():
                return _Expr("_models.Int32")
            case NumberType():
                return _Expr("float")
            case StringType():
                return _Expr("str", borrows=True)
            case AnyType():
                return _Expr("_t.Any")
            case EnumType(values=values):
                name = nested_name(owner, field_name)
                self._table.add(
                    scope.module,
                    EnumDecl(
                        name,
                        values,
                        enum_member_names(values),
                        self._nested_doc(scope, owner, field_name, meta, description),
                        docs.deprecation_message(meta.deprecation),
                    ),
                )
                return _Expr(name)
            case ArrayType(item=item):
                inner = self._type_expr(
                    scope, owner, field_name, item.ty, (*path, "item"), meta, description
                )
                length = ty.fixed_length
                if length is not None:
                    text = f"_pd.conlist({inner.text}, min_length={length}, max_length={length})"
                else:
                    text = f"list[{inner.text}]"
                return _Expr(text, inner.borrows, inner.boxed)
            case ObjectType(fields=fields) if not fields:
                return _Expr("_models.Empty")
            case ObjectType(fields=fields):
                name = nested_name(owner, field_name)
                record_fields = self._fields(scope, name, fields, (*path, "field"))
                borrows = any(f.borrows for f in record_fields)
                self._table.add(
                    scope.module,
                    RecordDecl(
                        name,
                        record_fields,
                        doc=self._nested_doc(scope, owner, field_name, meta, description),
                        deprecated=docs.deprecation_message(meta.deprecation),
                        borrows=borrows,
                    ),
                )
                return _Expr(name, borrows)
        msg = f"unsupported type descriptor {ty!r}"
        raise TypeError(msg)

    def _nested_doc(
        self,
        scope: _Scope,
        owner: str,
        field_name: str | None,
        meta: NodeMeta,
        description: str | None,
    ) -> str:
        note = None
        if field_name is not None:
            note = docs.field_usage_note(
                self._package, scope.module, owner, member_name(field_name)
            )
        return docs.docstring(meta, description, note)


def member_name(wire_name: str) -> str:
    """Python attribute name of a record field."""
    name = snake_case(wire_name)
    if name in _BASE_ATTRIBUTES or name in _ANNOTATION_NAMES or name.startswith("model_"):
        name = f"{name}_"
    return name


def nested_name(owner: str, field_name: str | None) -> str:
    """Name of an inline type: the owner followed by the field in PascalCase.

    Inline items of an array type definition have no field; they are named
    ``{owner}Item`` so they do not collide with the alias itself.
    """
    if field_name is None:
        return f"{owner}Item"
    return f"{owner}{pascal_case(field_name)}"


