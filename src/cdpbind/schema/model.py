"""In-memory protocol schema: Definition -> Domain -> {Method, TypeDef} -> Field -> Type.

Pure data, no code-generation concerns. Instances are frozen and built
once per schema load by :mod:`cdpbind.schema.loader`.

INVARIANT: ownership is tree-shaped. The only cross-node edge is
:class:`RefType`, which holds a *name* resolved after parsing.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Types (closed sum)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RefType:
    """``$ref`` to a named type, optionally qualified as ``Domain.Name``."""

    target: str


@dataclass(frozen=True)
class BooleanType:
    pass


@dataclass(frozen=True)
class IntegerType:
    pass


@dataclass(frozen=True)
class NumberType:
    pass


@dataclass(frozen=True)
class StringType:
    pass


@dataclass(frozen=True)
class EnumType:
    """A string restricted to an ordered set of values."""

    values: tuple[str, ...]


@dataclass(frozen=True)
class ArrayType:
    item: Item
    min_items: int | None = None
    max_items: int | None = None

    @property
    def fixed_length(self) -> int | None:
        """Exact length when ``minItems == maxItems``, else None."""
        if self.min_items is not None and self.min_items == self.max_items:
            return self.min_items
        return None


@dataclass(frozen=True)
class ObjectType:
    fields: tuple[Field, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True for the canonical empty-parameter object."""
        return not self.fields


@dataclass(frozen=True)
class AnyType:
    pass


type SchemaType = (
    RefType
    | BooleanType
    | IntegerType
    | NumberType
    | StringType
    | EnumType
    | ArrayType
    | ObjectType
    | AnyType
)


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Item:
    """Array item descriptor."""

    ty: SchemaType
    description: str | None = None


@dataclass(frozen=True)
class Field:
    name: str
    ty: SchemaType
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False
    optional: bool = False


@dataclass(frozen=True)
class TypeDef:
    name: str
    ty: SchemaType
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False


@dataclass(frozen=True)
class Method:
    """A command or an event; which one depends on the list holding it."""

    name: str
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False
    parameters: tuple[Field, ...] = ()
    returns: tuple[Field, ...] = ()
    handlers: tuple[str, ...] = ()
    redirect: str | None = None


@dataclass(frozen=True)
class Domain:
    name: str
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False
    dependencies: tuple[str, ...] = ()
    type_defs: tuple[TypeDef, ...] = ()
    commands: tuple[Method, ...] = ()
    events: tuple[Method, ...] = ()

    def qualified(self, method: Method) -> str:
        """Wire-level ``Domain.method`` name."""
        return f"{self.name}.{method.name}"

    def find_type(self, name: str) -> TypeDef | None:
        for type_def in self.type_defs:
            if type_def.name == name:
                return type_def
        return None


@dataclass(frozen=True)
class Version:
    major: str
    minor: str

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class Definition:
    version: Version
    domains: tuple[Domain, ...] = field(default_factory=tuple)

    def domain(self, name: str) -> Domain | None:
        for domain in self.domains:
            if domain.name == name:
                return domain
        return None

    def iter_methods(self) -> Iterator[tuple[Domain, str, Method]]:
        """Yield ``(domain, kind, method)`` with kind ``"command"`` or ``"event"``."""
        for domain in self.domains:
            for command in domain.commands:
                yield domain, "command", command
            for event in domain.events:
                yield domain, "event", event
