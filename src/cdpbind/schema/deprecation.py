"""Effective deprecation and experimental status for every schema node.

Each node carries its own ``deprecated`` flag and free-text description.
The effective status is computed by a recursive fold down the tree
(domain -> type/method -> field -> nested field), carrying the nearest
deprecated ancestor's status as the accumulator.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from cdpbind.schema.model import (
    ArrayType,
    Definition,
    Domain,
    Field,
    Method,
    ObjectType,
    SchemaType,
    TypeDef,
)

_WARNING_RE = re.compile(r"deprecat", re.IGNORECASE)
_PREFIX_RE = re.compile(r"^Deprecated, ")
_MARKDOWN_HAZARD_RE = re.compile(r"[*\[\]()]")

type NodePath = tuple[str, ...]


def escape_for_markdown(text: str) -> str:
    r"""Backslash-escape ``*``, ``[``, ``]``, ``(`` and ``)``."""
    return _MARKDOWN_HAZARD_RE.sub(lambda m: "\\" + m.group(0), text)


# --- Status values ---


@dataclass(frozen=True)
class NotDeprecated:
    is_deprecated = False
    has_own_warning = False

    @property
    def warning(self) -> str | None:
        return None


@dataclass(frozen=True)
class DeprecatedNoText:
    is_deprecated = True
    has_own_warning = False

    @property
    def warning(self) -> str | None:
        return None


@dataclass(frozen=True)
class DeprecatedWithText:
    """Deprecated with an explanatory warning.

    ``inherited`` is True when the text came from an ancestor rather than
    the node's own description.
    """

    text: str
    inherited: bool = False

    is_deprecated = True

    @property
    def has_own_warning(self) -> bool:
        return not self.inherited

    @property
    def warning(self) -> str | None:
        return self.text


type DeprecationStatus = NotDeprecated | DeprecatedNoText | DeprecatedWithText

NOT_DEPRECATED = NotDeprecated()


def deprecation_of(deprecated: bool, description: str | None) -> DeprecationStatus:
    """Status from a node's own flag and description, ignoring ancestors."""
    if not deprecated:
        return NOT_DEPRECATED
    if description is None or description == "Deprecated." or not _WARNING_RE.search(description):
        return DeprecatedNoText()
    return DeprecatedWithText(escape_for_markdown(_PREFIX_RE.sub("", description, count=1)))


def inherit(status: DeprecationStatus, parent: DeprecationStatus) -> DeprecationStatus:
    """Combine a node's own status with its nearest deprecated ancestor's.

    A node that is not deprecated stays so. A node with its own warning
    keeps it. Otherwise the ancestor's warning is inherited, if it has one.
    """
    if not status.is_deprecated or status.has_own_warning:
        return status
    if parent.warning is None:
        return status
    return DeprecatedWithText(parent.warning, inherited=True)


@dataclass(frozen=True)
class NodeMeta:
    """Effective metadata of one schema node."""

    deprecation: DeprecationStatus = NOT_DEPRECATED
    experimental: bool = False
    # Nearest deprecated ancestor (or self), handed down to children.
    carried: DeprecationStatus = NOT_DEPRECATED

    @property
    def deprecated(self) -> bool:
        return self.deprecation.is_deprecated

    def child(self, deprecated: bool, description: str | None, experimental: bool) -> NodeMeta:
        status = inherit(deprecation_of(deprecated, description), self.carried)
        return NodeMeta(
            deprecation=status,
            experimental=self.experimental or experimental,
            carried=status if status.is_deprecated else self.carried,
        )


ROOT_META = NodeMeta()


# --- Fold over the definition ---


class DeprecationIndex(Mapping[NodePath, NodeMeta]):
    """Effective :class:`NodeMeta` keyed by node path.

    Paths look like ``("Page",)``, ``("Page", "type", "Frame")``,
    ``("Page", "command", "navigate", "param", "url")`` and
    ``("DOM", "type", "Node", "field", "children", "item")``.
    """

    def __init__(self, entries: dict[NodePath, NodeMeta]) -> None:
        self._entries = entries

    def __getitem__(self, path: NodePath) -> NodeMeta:
        return self._entries[path]

    def __iter__(self) -> Iterator[NodePath]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def deprecated_paths(self) -> list[NodePath]:
        return [path for path, meta in self._entries.items() if meta.deprecated]


def propagate(definition: Definition) -> DeprecationIndex:
    """Compute effective metadata for every node of *definition*."""
    entries: dict[NodePath, NodeMeta] = {}
    for domain in definition.domains:
        _fold_domain(domain, entries)
    return DeprecationIndex(entries)


def _fold_domain(domain: Domain, out: dict[NodePath, NodeMeta]) -> None:
    path: NodePath = (domain.name,)
    meta = ROOT_META.child(domain.deprecated, domain.description, domain.experimental)
    out[path] = meta
    for type_def in domain.type_defs:
        _fold_type_def(type_def, path, meta, out)
    for command in domain.commands:
        _fold_method(command, "command", path, meta, out)
    for event in domain.events:
        _fold_method(event, "event", path, meta, out)


def _fold_type_def(
    type_def: TypeDef, parent: NodePath, parent_meta: NodeMeta, out: dict[NodePath, NodeMeta]
) -> None:
    path = (*parent, "type", type_def.name)
    meta = parent_meta.child(type_def.deprecated, type_def.description, type_def.experimental)
    out[path] = meta
    _fold_type(type_def.ty, path, meta, out)


def _fold_method(
    method: Method,
    kind: str,
    parent: NodePath,
    parent_meta: NodeMeta,
    out: dict[NodePath, NodeMeta],
) -> None:
    path = (*parent, kind, method.name)
    meta = parent_meta.child(method.deprecated, method.description, method.experimental)
    out[path] = meta
    for param in method.parameters:
        _fold_field(param, (*path, "param"), meta, out)
    for ret in method.returns:
        _fold_field(ret, (*path, "return"), meta, out)


def _fold_field(
    field: Field, parent: NodePath, parent_meta: NodeMeta, out: dict[NodePath, NodeMeta]
) -> None:
    path = (*parent, field.name)
    meta = parent_meta.child(field.deprecated, field.description, field.experimental)
    out[path] = meta
    _fold_type(field.ty, path, meta, out)


def _fold_type(
    ty: SchemaType, path: NodePath, meta: NodeMeta, out: dict[NodePath, NodeMeta]
) -> None:
    match ty:
        case ObjectType(fields=fields):
            for nested in fields:
                _fold_field(nested, (*path, "field"), meta, out)
        case ArrayType(item=item):
            item_path = (*path, "item")
            out[item_path] = meta
            _fold_type(item.ty, item_path, meta, out)
        case _:
            pass
