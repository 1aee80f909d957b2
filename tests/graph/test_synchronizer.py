"""Tests for schema snapshot synchronization."""

import logging

import pytest

from dbview.graph.elements import GraphEdge, GraphNode, Position
from dbview.graph.node_types import EdgeOrigin
from dbview.graph.synchronizer import edge_id, grid_position, synchronize
from dbview.schema.loader import parse_snapshot


def _snapshot(table_names, relationships=()):
    return parse_snapshot({
        "tables": [{"name": n, "columns": [{"name": "id", "type": "INT"}]} for n in table_names],
        "relationships": [
            {"source_table": s, "target_table": t, "source_column": c}
            for s, t, c in relationships
        ],
    })


class TestGridPosition:
    @pytest.mark.parametrize(
        "index, expected",
        [
            (0, (0, 100)),
            (1, (250, 100)),
            (2, (500, 100)),
            (3, (0, 400)),
            (4, (250, 400)),
            (7, (250, 700)),
        ],
    )
    def test_grid(self, index, expected):
        assert grid_position(index) == expected

    def test_edge_id(self):
        assert edge_id(0) == "e-0"
        assert edge_id(12) == "e-12"


class TestInitialSynchronize:
    def test_new_tables_are_placed_on_grid(self, snapshot):
        nodes, _ = synchronize([], [], snapshot)

        assert [n.name for n in nodes] == ["users", "orders", "products", "reviews"]
        assert [n.position for n in nodes] == [
            (0, 100),
            (250, 100),
            (500, 100),
            (0, 400),
        ]

    def test_columns_come_from_snapshot(self, snapshot):
        nodes, _ = synchronize([], [], snapshot)

        users = nodes[0]
        assert [c.name for c in users.columns] == ["id", "email"]

    def test_relationships_become_indexed_edges(self, snapshot):
        _, edges = synchronize([], [], snapshot)

        assert [e.id for e in edges] == ["e-0", "e-1"]
        assert (edges[0].source, edges[0].target) == ("orders", "users")
        assert edges[0].source_column == "user_id"
        assert all(e.origin == EdgeOrigin.RELATIONSHIP for e in edges)

    def test_empty_snapshot(self):
        nodes, edges = synchronize([], [], _snapshot([]))
        assert nodes == []
        assert edges == []


class TestRefresh:
    def test_existing_table_keeps_position(self, snapshot):
        nodes, edges = synchronize([], [], snapshot)
        moved = [
            n.moved_to(1234.5, -20) if n.name == "orders" else n for n in nodes
        ]

        refreshed, _ = synchronize(moved, edges, snapshot)

        orders = next(n for n in refreshed if n.name == "orders")
        assert orders.position == (1234.5, -20)

    def test_position_kept_when_table_changes_index(self):
        first, _ = synchronize([], [], _snapshot(["a", "b", "c"]))
        first = [n.moved_to(9, 9) if n.name == "c" else n for n in first]

        # "c" moves from index 2 to index 0 on the server
        refreshed, _ = synchronize(first, [], _snapshot(["c", "a", "b"]))

        assert refreshed[0].name == "c"
        assert refreshed[0].position == (9, 9)

    def test_new_table_placed_by_its_own_index(self):
        first, _ = synchronize([], [], _snapshot(["a", "b"]))

        refreshed, _ = synchronize(first, [], _snapshot(["a", "b", "c", "d"]))

        assert refreshed[2].position == grid_position(2)
        assert refreshed[3].position == grid_position(3)

    def test_removed_table_is_dropped(self, snapshot):
        nodes, edges = synchronize([], [], snapshot)

        refreshed, _ = synchronize(nodes, edges, _snapshot(["users", "orders"]))

        assert [n.name for n in refreshed] == ["users", "orders"]
        assert all(n.name != "products" for n in refreshed)

    def test_columns_are_replaced_not_merged(self):
        first = parse_snapshot({"tables": [{"name": "t", "columns": ["a", "b"]}]})
        second = parse_snapshot({"tables": [{"name": "t", "columns": ["b", "c"]}]})

        nodes, _ = synchronize([], [], first)
        nodes, _ = synchronize(nodes, [], second)

        assert [c.name for c in nodes[0].columns] == ["b", "c"]

    def test_unchanged_snapshot_gives_same_edge_ids(self, snapshot):
        nodes, edges = synchronize([], [], snapshot)
        again_nodes, again_edges = synchronize(nodes, edges, snapshot)

        assert [e.id for e in again_edges] == [e.id for e in edges]
        assert again_edges == edges
        assert again_nodes == nodes

    def test_duplicate_relationships_get_separate_edges(self):
        snap = _snapshot(["a", "b"], [("a", "b", "b_id"), ("a", "b", "b_id")])

        _, edges = synchronize([], [], snap)

        assert [e.id for e in edges] == ["e-0", "e-1"]

    def test_user_edges_are_not_preserved(self, snapshot, caplog):
        nodes, edges = synchronize([], [], snapshot)
        user_edge = GraphEdge(
            id="user-users-products-0",
            source="users",
            target="products",
            origin=EdgeOrigin.USER,
        )

        with caplog.at_level(logging.DEBUG, logger="dbview.graph.synchronizer"):
            _, refreshed = synchronize(nodes, [*edges, user_edge], snapshot)

        assert user_edge not in refreshed
        assert len(refreshed) == 2
        assert "1 user-drawn connection" in caplog.text

    def test_inputs_are_not_modified(self, snapshot):
        previous = [GraphNode(name="users", position=Position(5, 5))]
        previous_copy = list(previous)

        synchronize(previous, [], snapshot)

        assert previous == previous_copy
