"""Strict loading of protocol JSON documents into the schema model.

The wire shape is validated by frozen Pydantic models that forbid
unknown keys at every level, then converted into the plain dataclasses
of :mod:`cdpbind.schema.model`. The protocol ships as two halves
(``browser_protocol.json`` and ``js_protocol.json``) that must report
the same version.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cdpbind.errors import SchemaParseError, VersionMismatchError
from cdpbind.schema.model import (
    AnyType,
    ArrayType,
    BooleanType,
    Definition,
    Domain,
    EnumType,
    IntegerType,
    Item,
    Method,
    NumberType,
    ObjectType,
    RefType,
    SchemaType,
    StringType,
    TypeDef,
    Version,
)
from cdpbind.schema.model import Field as SchemaField

logger = logging.getLogger(__name__)

type _Primitive = Literal["boolean", "integer", "number", "string", "array", "object", "any"]

_STRICT = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


# --- Wire models (one per JSON object shape) ---


class _TypeDescriptor(BaseModel):
    """Keys shared by every object that describes a type."""

    model_config = _STRICT

    reference: str | None = Field(default=None, alias="$ref")
    primitive: _Primitive | None = Field(default=None, alias="type")
    enum_values: list[str] | None = Field(default=None, alias="enum")
    items: ItemWire | None = None
    min_items: int | None = Field(default=None, alias="minItems", ge=0)
    max_items: int | None = Field(default=None, alias="maxItems", ge=0)
    properties: list[FieldWire] | None = None


class ItemWire(_TypeDescriptor):
    description: str | None = None


class FieldWire(_TypeDescriptor):
    name: str
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False
    optional: bool = False


class TypeDefWire(_TypeDescriptor):
    id: str
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False


class MethodWire(BaseModel):
    model_config = _STRICT

    name: str
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False
    handlers: list[str] = Field(default_factory=list)
    parameters: list[FieldWire] = Field(default_factory=list)
    returns: list[FieldWire] = Field(default_factory=list)
    redirect: str | None = None


class DomainWire(BaseModel):
    model_config = _STRICT

    domain: str
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False
    dependencies: list[str] = Field(default_factory=list)
    types: list[TypeDefWire] = Field(default_factory=list)
    commands: list[MethodWire] = Field(default_factory=list)
    events: list[MethodWire] = Field(default_factory=list)


class VersionWire(BaseModel):
    model_config = _STRICT

    major: str
    minor: str


class DefinitionWire(BaseModel):
    model_config = _STRICT

    version: VersionWire
    domains: list[DomainWire]


_TypeDescriptor.model_rebuild()
ItemWire.model_rebuild()
FieldWire.model_rebuild()
TypeDefWire.model_rebuild()


# --- Conversion into the schema model ---


def _into_type(desc: _TypeDescriptor, name: str) -> SchemaType:
    """Convert a type descriptor; *name* is only used in error messages."""
    if desc.reference is not None:
        return RefType(desc.reference)

    match desc.primitive:
        case None:
            msg = f"neither 'type' nor '$ref' keys found in type descriptor for '{name}'"
            raise SchemaParseError(msg)
        case "boolean":
            return BooleanType()
        case "integer":
            return IntegerType()
        case "number":
            return NumberType()
        case "string":
            if desc.enum_values is None:
                return StringType()
            return EnumType(tuple(desc.enum_values))
        case "array":
            if desc.items is None:
                msg = f"'items' key not found in array type descriptor for '{name}'"
                raise SchemaParseError(msg)
            return ArrayType(
                item=_into_item(desc.items),
                min_items=desc.min_items,
                max_items=desc.max_items,
            )
        case "object":
            return ObjectType(tuple(_into_field(prop) for prop in desc.properties or ()))
        case "any":
            return AnyType()


def _into_item(wire: ItemWire) -> Item:
    return Item(ty=_into_type(wire, "array item"), description=wire.description)


def _into_field(wire: FieldWire) -> SchemaField:
    return SchemaField(
        name=wire.name,
        ty=_into_type(wire, wire.name),
        description=wire.description,
        experimental=wire.experimental,
        deprecated=wire.deprecated,
        optional=wire.optional,
    )


def _into_type_def(wire: TypeDefWire) -> TypeDef:
    return TypeDef(
        name=wire.id,
        ty=_into_type(wire, wire.id),
        description=wire.description,
        experimental=wire.experimental,
        deprecated=wire.deprecated,
    )


def _into_method(wire: MethodWire) -> Method:
    return Method(
        name=wire.name,
        description=wire.description,
        experimental=wire.experimental,
        deprecated=wire.deprecated,
        parameters=tuple(_into_field(p) for p in wire.parameters),
        returns=tuple(_into_field(r) for r in wire.returns),
        handlers=tuple(wire.handlers),
        redirect=wire.redirect,
    )


def _into_domain(wire: DomainWire) -> Domain:
    return Domain(
        name=wire.domain,
        description=wire.description,
        experimental=wire.experimental,
        deprecated=wire.deprecated,
        dependencies=tuple(wire.dependencies),
        type_defs=tuple(_into_type_def(t) for t in wire.types),
        commands=tuple(_into_method(c) for c in wire.commands),
        events=tuple(_into_method(e) for e in wire.events),
    )


# --- Public API ---


def parse_definition(data: Any, *, source: str | None = None) -> Definition:
    """Parse one protocol document.

    *data* may be raw JSON (``str``/``bytes``) or an already-decoded mapping.

    Raises:
        SchemaParseError: On invalid JSON, unknown keys, missing keys, or
            malformed type descriptors.
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError as exc:
            raise SchemaParseError(f"invalid JSON: {exc}", source=source) from exc

    try:
        wire = DefinitionWire.model_validate(data)
    except ValidationError as exc:
        raise SchemaParseError(str(exc), source=source) from exc

    try:
        definition = Definition(
            version=Version(major=wire.version.major, minor=wire.version.minor),
            domains=tuple(_into_domain(d) for d in wire.domains),
        )
    except SchemaParseError as exc:
        raise SchemaParseError(str(exc), source=source) from exc

    logger.debug(
        "Parsed protocol %s from %s: %d domains",
        definition.version,
        source or "<memory>",
        len(definition.domains),
    )
    return definition


def load_definition(path: Path) -> Definition:
    """Read and parse a single protocol document from *path*."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise SchemaParseError(f"cannot read schema: {exc.strerror}", source=str(path)) from exc
    return parse_definition(raw, source=str(path))


def merge_definitions(browser: Definition, js: Definition) -> Definition:
    """Concatenate the browser and js halves, browser domains first.

    Raises:
        VersionMismatchError: If the two halves report different versions.
    """
    if browser.version != js.version:
        raise VersionMismatchError(str(browser.version), str(js.version))
    return Definition(version=browser.version, domains=browser.domains + js.domains)


def load_protocol(browser_path: Path, js_path: Path) -> Definition:
    """Load both halves of the protocol and merge them."""
    return merge_definitions(load_definition(browser_path), load_definition(js_path))
