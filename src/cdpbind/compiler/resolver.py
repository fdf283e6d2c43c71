"""Resolution of ``$ref`` targets to generated declarations."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from cdpbind.errors import UnresolvedReferenceError
from cdpbind.schema.model import ArrayType, Definition, ObjectType, RefType, SchemaType
from cdpbind.schema.naming import QualifiedName, module_name, pascal_case, split_reference

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Index of every TypeDef, per domain, for reference lookups."""

    def __init__(self, definition: Definition) -> None:
        self._definition = definition
        self._types: dict[str, set[str]] = {
            domain.name: {type_def.name for type_def in domain.type_defs}
            for domain in definition.domains
        }

    def resolve(self, domain: str, target: str, *, location: str | None = None) -> QualifiedName:
        """Resolve *target* as seen from *domain*.

        Raises:
            UnresolvedReferenceError: If the target domain or type is unknown.
        """
        ref_domain, ref_name = split_reference(domain, target)
        known = self._types.get(ref_domain)
        if known is None or ref_name not in known:
            raise UnresolvedReferenceError(domain, target, location=location)
        return QualifiedName(module_name(ref_domain), pascal_case(ref_name))

    def validate(self) -> int:
        """Resolve every reference in the definition; return how many were checked.

        Raises on the first unresolved reference, naming where it occurs.
        """
        count = 0
        for domain, location, ty in self._iter_references():
            self.resolve(domain, ty.target, location=location)
            count += 1
        logger.debug("Resolved %d references", count)
        return count

    def _iter_references(self) -> Iterator[tuple[str, str, RefType]]:
        for domain in self._definition.domains:
            for type_def in domain.type_defs:
                loc = f"{domain.name}.{type_def.name}"
                for ref in _references_in(type_def.ty, loc):
                    yield domain.name, *ref
            for kind, methods in (("command", domain.commands), ("event", domain.events)):
                for method in methods:
                    for field in (*method.parameters, *method.returns):
                        loc = f"{domain.qualified(method)} {kind} field '{field.name}'"
                        for ref in _references_in(field.ty, loc):
                            yield domain.name, *ref


def _references_in(ty: SchemaType, location: str) -> Iterator[tuple[str, RefType]]:
    match ty:
        case RefType():
            yield location, ty
        case ArrayType(item=item):
            yield from _references_in(item.ty, location)
        case ObjectType(fields=fields):
            for field in fields:
                yield from _references_in(field.ty, f"{location}.{field.name}")
        case _:
            pass
