"""Tests for the borrowing analysis."""

from __future__ import annotations

from dataclasses import replace

from cdpbind.compiler.reachability import (
    STRING_NODE,
    borrowing_set_of,
    build_reference_graph,
    compute_borrowing_set,
    explain,
    owned_types,
)
from cdpbind.schema.model import Definition
from cdpbind.schema.naming import QualifiedName as Q

EXPECTED_BORROWING = frozenset(
    {
        Q("page", "FrameId"),
        Q("page", "Frame"),
        Q("page", "NavigateCommand"),
        Q("page", "NavigateResponse"),
        Q("page", "FrameNavigatedEvent"),
        Q("network", "LoaderId"),
        Q("network", "CachedResource"),
        Q("dom", "Node"),
        Q("dom", "GetDocumentResponse"),
        Q("runtime", "RemoteObjectId"),
        Q("runtime", "RemoteObject"),
        Q("runtime", "EvaluateCommand"),
        Q("runtime", "EvaluateResponse"),
    }
)


class TestBorrowingSet:
    def test_fixture_protocol(self, definition: Definition) -> None:
        assert compute_borrowing_set(definition) == EXPECTED_BORROWING

    def test_independent_of_traversal_order(self, definition: Definition) -> None:
        reordered = replace(definition, domains=tuple(reversed(definition.domains)))
        assert compute_borrowing_set(reordered) == compute_borrowing_set(definition)

    def test_request_and_response_are_separate(self, definition: Definition) -> None:
        borrowing = compute_borrowing_set(definition)
        assert Q("dom", "GetDocumentResponse") in borrowing
        assert Q("dom", "GetDocumentCommand") not in borrowing

    def test_enum_is_not_string_data(self, definition: Definition) -> None:
        assert Q("page", "TransitionType") not in compute_borrowing_set(definition)

    def test_empty_object_owns(self, definition: Definition) -> None:
        borrowing = compute_borrowing_set(definition)
        assert Q("network", "Headers") not in borrowing
        assert Q("network", "SetExtraHttpHeadersCommand") not in borrowing


class TestGraph:
    def test_node_per_named_type(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        assert STRING_NODE in graph
        # 13 type defs, 8 commands (request + response), 3 events
        assert graph.number_of_nodes() == 1 + 13 + 16 + 3

    def test_self_reference_adds_no_loop(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        node = Q("dom", "Node")
        assert not graph.has_edge(node, node)
        assert graph.has_edge(STRING_NODE, node)

    def test_edges_point_to_embedding_type(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        assert graph.has_edge(Q("network", "LoaderId"), Q("page", "Frame"))
        assert graph.has_edge(Q("page", "Quad"), Q("dom", "GetContentQuadsResponse"))

    def test_owned_types_listed(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        owned = set(owned_types(graph))
        assert Q("page", "Viewport") in owned
        assert owned.isdisjoint(borrowing_set_of(graph))
        assert len(owned) + len(borrowing_set_of(graph)) == graph.number_of_nodes() - 1


class TestExplain:
    def test_shortest_chain(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        chain = explain(graph, Q("page", "FrameNavigatedEvent"))
        assert chain == [STRING_NODE, Q("page", "Frame"), Q("page", "FrameNavigatedEvent")]

    def test_owned_type_has_no_chain(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        assert explain(graph, Q("page", "Viewport")) is None

    def test_unknown_type(self, definition: Definition) -> None:
        graph = build_reference_graph(definition)
        assert explain(graph, Q("page", "Nope")) is None
