"""Whole-schema "borrows" analysis over a NetworkX reference graph.

One node per generated named type plus the :data:`STRING_NODE`. Edges
point from a dependency to the type that embeds it:

- a ``string`` field adds ``STRING_NODE -> enclosing``
- a ``$ref`` to another type ``T`` adds ``T -> enclosing``

Arrays and inline objects recurse with the same enclosing identity.
Every node reachable from :data:`STRING_NODE` borrows. Built once per
compile run, never cached across runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from cdpbind.compiler.resolver import ReferenceResolver
from cdpbind.schema.model import ArrayType, Definition, ObjectType, RefType, SchemaType, StringType
from cdpbind.schema.naming import (
    QualifiedName,
    method_class_name,
    module_name,
    pascal_case,
    response_class_name,
)

logger = logging.getLogger(__name__)

STRING_NODE = "<string>"

type _Graph = nx.DiGraph
type _Node = QualifiedName | str


class _GraphBuilder:
    def __init__(self, resolver: ReferenceResolver) -> None:
        self._resolver = resolver
        self.graph: _Graph = nx.DiGraph()
        self.graph.add_node(STRING_NODE)

    def add_owner(self, owner: QualifiedName) -> None:
        # Isolated types still appear, so inspection can list them as owned.
        self.graph.add_node(owner)

    def traverse(self, domain: str, owner: QualifiedName, ty: SchemaType) -> None:
        match ty:
            case StringType():
                self.graph.add_edge(STRING_NODE, owner)
            case RefType(target=target):
                resolved = self._resolver.resolve(domain, target, location=str(owner))
                if resolved != owner:
                    self.graph.add_edge(resolved, owner)
            case ArrayType(item=item):
                self.traverse(domain, owner, item.ty)
            case ObjectType(fields=fields):
                for field in fields:
                    self.traverse(domain, owner, field.ty)
            case _:
                pass


def build_reference_graph(
    definition: Definition, resolver: ReferenceResolver | None = None
) -> _Graph:
    """Build the reference graph for every TypeDef and method of *definition*."""
    builder = _GraphBuilder(resolver or ReferenceResolver(definition))
    for domain in definition.domains:
        module = module_name(domain.name)
        for type_def in domain.type_defs:
            owner = QualifiedName(module, pascal_case(type_def.name))
            builder.add_owner(owner)
            builder.traverse(domain.name, owner, type_def.ty)
        for kind, methods in (("command", domain.commands), ("event", domain.events)):
            for method in methods:
                request = QualifiedName(module, method_class_name(method.name, kind))
                builder.add_owner(request)
                for param in method.parameters:
                    builder.traverse(domain.name, request, param.ty)
                if kind == "command":
                    response = QualifiedName(module, response_class_name(method.name))
                    builder.add_owner(response)
                    for ret in method.returns:
                        builder.traverse(domain.name, response, ret.ty)
    return builder.graph


def compute_borrowing_set(
    definition: Definition, resolver: ReferenceResolver | None = None
) -> frozenset[QualifiedName]:
    """Return every generated named type that transitively holds a string."""
    graph = build_reference_graph(definition, resolver)
    return borrowing_set_of(graph)


def borrowing_set_of(graph: _Graph) -> frozenset[QualifiedName]:
    reached = nx.descendants(graph, STRING_NODE)
    logger.debug(
        "Reachability: %d of %d types borrow",
        len(reached),
        graph.number_of_nodes() - 1,
    )
    return frozenset(reached)


def explain(graph: _Graph, target: QualifiedName) -> list[_Node] | None:
    """Shortest chain from :data:`STRING_NODE` to *target*, or None if owned."""
    if target not in graph:
        return None
    try:
        return nx.shortest_path(graph, STRING_NODE, target)
    except nx.NetworkXNoPath:
        return None


def owned_types(graph: _Graph) -> Iterable[QualifiedName]:
    """Types not reachable from :data:`STRING_NODE`, in graph insertion order."""
    reached = nx.descendants(graph, STRING_NODE)
    return [n for n in graph.nodes if n != STRING_NODE and n not in reached]
