"""One compile run: schema model -> analyses -> declaration table."""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx
import structlog

from cdpbind.compiler.emitter import DeclarationTable, TypeEmitter
from cdpbind.compiler.reachability import borrowing_set_of, build_reference_graph
from cdpbind.compiler.resolver import ReferenceResolver
from cdpbind.schema.deprecation import DeprecationIndex, propagate
from cdpbind.schema.model import Definition
from cdpbind.schema.naming import QualifiedName

log = structlog.get_logger("cdpbind.compiler")


@dataclass(frozen=True)
class CompiledProtocol:
    """Everything derived from one schema load. Read-only once built."""

    definition: Definition
    package: str
    resolver: ReferenceResolver
    graph: nx.DiGraph
    borrowing: frozenset[QualifiedName]
    metadata: DeprecationIndex
    table: DeclarationTable


def compile_protocol(definition: Definition, *, package: str = "cdp") -> CompiledProtocol:
    """Run every compile phase over *definition*.

    Raises:
        SchemaError: On an unresolved reference or a declaration name
            collision. Nothing is returned in that case.
    """
    with structlog.contextvars.bound_contextvars(
        package=package, protocol=str(definition.version)
    ):
        return _compile(definition, package)


def _compile(definition: Definition, package: str) -> CompiledProtocol:
    resolver = ReferenceResolver(definition)
    references = resolver.validate()
    log.debug("compile.resolve", references=references)

    graph = build_reference_graph(definition, resolver)
    borrowing = borrowing_set_of(graph)
    log.debug("compile.reachability", nodes=graph.number_of_nodes() - 1, borrowing=len(borrowing))

    metadata = propagate(definition)
    log.debug("compile.metadata", nodes=len(metadata), deprecated=len(metadata.deprecated_paths()))

    table = TypeEmitter(definition, resolver, borrowing, metadata, package=package).emit()
    log.debug("compile.emit", declarations=len(table), modules=len(table.modules()))

    return CompiledProtocol(
        definition=definition,
        package=package,
        resolver=resolver,
        graph=graph,
        borrowing=borrowing,
        metadata=metadata,
        table=table,
    )
