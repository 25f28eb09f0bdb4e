import math
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import numpy as np  # noqa: E402
import pytest  # noqa: E402
from fadelayout.config import LayoutConfig  # noqa: E402
from fadelayout.forces import (  # noqa: E402
    apply_attraction,
    compute_forces,
    compute_repulsion,
    compute_repulsion_exact,
    spring_force,
)
from fadelayout.model import Node  # noqa: E402
from fadelayout.quadtree import QuadTree  # noqa: E402


def make_nodes(points):
    return [Node(i, x=float(x), y=float(y)) for i, (x, y) in enumerate(points)]


def random_nodes(n=20, seed=11, scale=50.0):
    rng = np.random.default_rng(seed)
    return make_nodes(rng.random((n, 2)) * scale)


def test_attraction_is_equal_and_opposite():
    config = LayoutConfig(gravitation=0.0)
    nodes = make_nodes([(0.0, 0.0), (7.0, 3.0)])
    forces = compute_forces(nodes, [(0, 1)], QuadTree.build(nodes), config)
    assert forces[0] == (-forces[1][0], -forces[1][1])
    assert forces[0] != (0.0, 0.0)


def test_attraction_sums_to_zero_over_many_edges():
    config = LayoutConfig()
    nodes = random_nodes(8)
    edges = [(0, 1), (1, 2), (2, 3), (3, 0), (4, 5), (6, 7), (7, 4)]
    apply_attraction(nodes, edges, config)
    assert sum(n.fx for n in nodes) == pytest.approx(0.0, abs=1e-12)
    assert sum(n.fy for n in nodes) == pytest.approx(0.0, abs=1e-12)


def test_spring_pulls_stretched_edge_together():
    config = LayoutConfig()
    src, dst = make_nodes([(0.0, 0.0), (10.0, 0.0)])
    fx, fy = spring_force(src, dst, 0, 1, config)
    assert fx < 0
    assert fy == 0.0
    assert fx == pytest.approx(-config.strain * math.log(10.0 / config.rest_length))


def test_spring_is_zero_at_rest_length():
    config = LayoutConfig()
    src, dst = make_nodes([(1.0, 1.0), (1.0, 1.0 + config.rest_length)])
    fx, fy = spring_force(src, dst, 0, 1, config)
    assert fx == pytest.approx(0.0, abs=1e-12)
    assert fy == pytest.approx(0.0, abs=1e-12)


def test_spring_pushes_apart_when_too_short():
    config = LayoutConfig()
    src, dst = make_nodes([(0.0, 0.0), (1.5, 0.0)])
    fx, _ = spring_force(src, dst, 0, 1, config)
    assert fx > 0


def test_repulsion_pushes_nodes_apart():
    config = LayoutConfig()
    nodes = make_nodes([(0.0, 0.0), (4.0, 0.0)])
    (f0x, f0y), (f1x, f1y) = compute_repulsion(nodes, QuadTree.build(nodes), config)
    assert f0x == pytest.approx(-config.gravitation / 16.0)
    assert f1x == pytest.approx(config.gravitation / 16.0)
    assert f0y == pytest.approx(0.0)


def test_repulsion_distance_is_floored():
    config = LayoutConfig()
    nodes = make_nodes([(0.0, 0.0), (0.01, 0.0)])
    (f0x, _), _ = compute_repulsion(nodes, QuadTree.build(nodes), config)
    assert f0x == pytest.approx(-config.gravitation / config.min_distance ** 2)


def test_coincident_nodes_get_opposite_finite_forces():
    config = LayoutConfig()
    nodes = make_nodes([(2.0, 2.0), (2.0, 2.0)])
    (f0x, f0y), (f1x, f1y) = compute_repulsion(nodes, QuadTree.build(nodes), config)
    assert all(math.isfinite(v) for v in (f0x, f0y, f1x, f1y))
    assert (f0x, f0y) == (-f1x, -f1y)
    assert math.hypot(f0x, f0y) == pytest.approx(config.gravitation / config.min_distance ** 2)


def test_tree_matches_brute_force_when_fully_opened():
    config = LayoutConfig(opening_angle=0.0)
    nodes = random_nodes()
    exact = compute_repulsion_exact(nodes, config)
    approx = compute_repulsion(nodes, QuadTree.build(nodes), config)
    for (ex, ey), (ax, ay) in zip(exact, approx):
        assert ax == pytest.approx(ex, rel=1e-9, abs=1e-12)
        assert ay == pytest.approx(ey, rel=1e-9, abs=1e-12)


def test_tree_approximation_close_to_brute_force():
    config = LayoutConfig(opening_angle=0.3)
    nodes = random_nodes(n=20, seed=5)
    exact = compute_repulsion_exact(nodes, config)
    approx = compute_repulsion(nodes, QuadTree.build(nodes), config)
    error = sum(math.hypot(ax - ex, ay - ey) for (ex, ey), (ax, ay) in zip(exact, approx))
    total = sum(math.hypot(ex, ey) for ex, ey in exact)
    assert error / total < 0.05


def test_brute_force_handles_coincident_nodes():
    config = LayoutConfig()
    nodes = make_nodes([(1.0, 1.0), (1.0, 1.0), (5.0, 5.0)])
    exact = compute_repulsion_exact(nodes, config)
    tree_forces = compute_repulsion(nodes, QuadTree.build(nodes), config.replace(opening_angle=0.0))
    for (ex, ey), (ax, ay) in zip(exact, tree_forces):
        assert ax == pytest.approx(ex, rel=1e-9, abs=1e-12)
        assert ay == pytest.approx(ey, rel=1e-9, abs=1e-12)


def test_parallel_repulsion_matches_sequential():
    config = LayoutConfig()
    nodes = random_nodes(n=40, seed=2)
    tree = QuadTree.build(nodes)
    sequential = compute_repulsion(nodes, tree, config)
    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = compute_repulsion(nodes, tree, config, pool)
    assert parallel == sequential


def test_compute_forces_stores_net_force_on_nodes():
    config = LayoutConfig()
    nodes = random_nodes(n=6, seed=9)
    forces = compute_forces(nodes, [(0, 1), (2, 3)], QuadTree.build(nodes), config)
    assert forces == [(n.fx, n.fy) for n in nodes]
