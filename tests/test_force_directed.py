import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import networkx as nx  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402
from fadelayout.config import LayoutConfig  # noqa: E402
from fadelayout.force_directed import (  # noqa: E402
    layout_force_directed,
    layout_graph,
    node_specs_from_frame,
)
from fadelayout.model import Rect, build_graph  # noqa: E402


def test_layout_force_directed_returns_all_nodes():
    nodes_df = pd.DataFrame({"Node ID": ["A", "B", "C", "D"]})
    edges = {("A", "B"), ("B", "C"), ("C", "D")}
    pos = layout_force_directed(nodes_df, edges, bounds=(0, 0, 600, 400), seed=1)
    assert set(pos) == {"A", "B", "C", "D"}
    for x, y in pos.values():
        assert -1e-9 <= x <= 600 + 1e-9
        assert -1e-9 <= y <= 400 + 1e-9


def test_layout_force_directed_is_reproducible():
    nodes_df = pd.DataFrame({"Node ID": [f"T{i}" for i in range(8)]})
    edges = [(f"T{i}", f"T{i + 1}") for i in range(7)]
    first = layout_force_directed(nodes_df, edges, seed=42, iterations=100)
    second = layout_force_directed(nodes_df, edges, seed=42, iterations=100)
    assert first == second


def test_frame_coordinates_become_initial_positions():
    nodes_df = pd.DataFrame({
        "Node ID": ["A", "B", "C"],
        "X": [0.0, 5.0, None],
        "Y": [0.0, 5.0, 1.0],
    })
    specs = node_specs_from_frame(nodes_df)
    assert specs == [("A", (0.0, 0.0)), ("B", (5.0, 5.0)), "C"]


def test_frame_without_id_column_rejected():
    with pytest.raises(ValueError):
        node_specs_from_frame(pd.DataFrame({"Task ID": ["A"]}))


def test_unknown_edge_rejected():
    nodes_df = pd.DataFrame({"Node ID": ["A"]})
    with pytest.raises(ValueError):
        layout_force_directed(nodes_df, [("A", "Z")])


def test_layout_graph_uses_pos_attribute():
    G = nx.DiGraph()
    G.add_node(1, pos=(0.0, 0.0))
    G.add_node(2, pos=(10.0, 0.0))
    G.add_edge(1, 2)
    config = LayoutConfig(randomize_initial=False)
    pos = layout_graph(G, bounds=(0, 0, 100, 50), config=config)
    assert pos[1] == pytest.approx((0.0, 25.0))
    assert pos[2] == pytest.approx((100.0, 25.0))


def test_build_graph_keeps_positions_and_edges():
    G = build_graph([("a", (1.0, 2.0)), "b", {"id": "c", "x": 3, "y": 4}], [("a", "b"), ("b", "c")])
    assert list(G.nodes) == ["a", "b", "c"]
    assert G.nodes["a"]["pos"] == (1.0, 2.0)
    assert "pos" not in G.nodes["b"]
    assert G.nodes["c"]["pos"] == (3.0, 4.0)
    assert list(G.edges) == [("a", "b"), ("b", "c")]


def test_build_graph_rejects_duplicates():
    with pytest.raises(ValueError, match="重複"):
        build_graph(["a", "b", "a"])


def test_rect_accepts_mapping_and_tuple():
    assert Rect.of({"x": 1, "y": 2, "width": 3, "height": 4}) == Rect(1.0, 2.0, 3.0, 4.0)
    assert Rect.of((0, 0, 5, 5)).center == (2.5, 2.5)
