"""
力模型
Force Model

每個節點的合力 = 排斥力（透過四分樹做 Barnes-Hut 近似）+ 邊的彈簧引力
（對數彈簧模型）。
"""

import math
from concurrent.futures import Executor
from functools import partial
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import LayoutConfig
from .model import Node
from .quadtree import QuadTree

Force = Tuple[float, float]

# 黃金角，用來為完全重合的節點對產生固定的分離方向
_GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))
# 低於此距離視為完全重合，方向無法由座標決定
COINCIDENT = 1e-12


def _fallback_direction(i: int, j: int) -> Tuple[float, float]:
    """節點 i 遠離節點 j 的單位向量（i、j 重合時使用）。

    方向只由兩個索引決定，且 ``_fallback_direction(j, i)`` 恰為反向。
    """
    lo, hi = (i, j) if i < j else (j, i)
    theta = _GOLDEN_ANGLE * (lo * 31 + hi + 1)
    ux, uy = math.cos(theta), math.sin(theta)
    if i > j:
        return ux, uy
    return -ux, -uy


def _repel(
    px: float, py: float, sx: float, sy: float, weight: float,
    config: LayoutConfig, index: int, other: int,
) -> Force:
    dx = px - sx
    dy = py - sy
    distance = math.hypot(dx, dy)
    d = max(distance, config.min_distance)
    f = config.gravitation * weight / (d * d)
    if distance < COINCIDENT:
        ux, uy = _fallback_direction(index, other)
        return f * ux, f * uy
    return f * dx / distance, f * dy / distance


def repulsion_on(index: int, nodes: Sequence[Node], tree: QuadTree,
                 config: LayoutConfig) -> Force:
    """計算單一節點受到的排斥力。

    由根格開始走訪：不包含查詢點且 ``格寬 / 距離 < opening_angle`` 的內部
    格子視為位於重心、質量為佔用數的單一物體；其餘格子繼續展開。
    葉格中的其他節點一律逐一精確計算。

    Args:
        index: 查詢節點索引。
        nodes: 所有節點。
        tree: 本次迭代建立的四分樹（計算期間不會被修改）。
        config: 佈局參數。

    Returns:
        Force: (fx, fy)
    """
    node = nodes[index]
    px, py = node.x, node.y
    fx = fy = 0.0
    cells = tree.cells
    stack = [0] if cells else []
    while stack:
        cell = cells[stack.pop()]
        if cell.count == 0:
            continue
        if cell.children is None:
            for other in cell.occupants:
                if other == index:
                    continue
                o = nodes[other]
                ox, oy = _repel(px, py, o.x, o.y, 1.0, config, index, other)
                fx += ox
                fy += oy
            continue
        if not cell.contains(px, py):
            distance = math.hypot(px - cell.cx, py - cell.cy)
            if distance > 0 and cell.size / distance < config.opening_angle:
                ox, oy = _repel(px, py, cell.cx, cell.cy, cell.count, config, index, -1)
                fx += ox
                fy += oy
                continue
        stack.extend(cell.children)
    return fx, fy


def compute_repulsion(
    nodes: Sequence[Node],
    tree: QuadTree,
    config: LayoutConfig,
    executor: Optional[Executor] = None,
) -> List[Force]:
    """計算所有節點的排斥力；提供 executor 時以 map 方式平行計算"""
    if executor is None:
        return [repulsion_on(i, nodes, tree, config) for i in range(len(nodes))]
    work = partial(repulsion_on, nodes=nodes, tree=tree, config=config)
    return list(executor.map(work, range(len(nodes))))


def compute_repulsion_exact(nodes: Sequence[Node], config: LayoutConfig) -> List[Force]:
    """以兩兩配對的方式精確計算排斥力 (O(n^2))，用於驗證近似結果"""
    n = len(nodes)
    if n == 0:
        return []
    pos = np.array([(node.x, node.y) for node in nodes], dtype=float)
    diff = pos[:, None, :] - pos[None, :, :]
    dist = np.hypot(diff[..., 0], diff[..., 1])
    floored = np.maximum(dist, config.min_distance)
    magnitude = config.gravitation / (floored * floored)
    np.fill_diagonal(magnitude, 0.0)

    safe = np.where(dist < COINCIDENT, 1.0, dist)
    ux = diff[..., 0] / safe
    uy = diff[..., 1] / safe
    coincident = dist < COINCIDENT
    np.fill_diagonal(coincident, False)
    for i, j in np.argwhere(coincident):
        ux[i, j], uy[i, j] = _fallback_direction(int(i), int(j))

    fx = (magnitude * ux).sum(axis=1)
    fy = (magnitude * uy).sum(axis=1)
    return [(float(a), float(b)) for a, b in zip(fx, fy)]


def spring_force(src: Node, dst: Node, src_index: int, dst_index: int,
                 config: LayoutConfig) -> Force:
    """邊的彈簧力，回傳施加在終點上的力；起點受到大小相同、方向相反的力。

    f = strain * ln(distance / rest_length)，距離大於自然長度時互相吸引，
    小於時互相推開。
    """
    dx = src.x - dst.x
    dy = src.y - dst.y
    distance = math.hypot(dx, dy)
    d = max(distance, config.min_distance)
    f = config.strain * math.log(d / config.rest_length)
    if distance < COINCIDENT:
        ux, uy = _fallback_direction(src_index, dst_index)
        return f * ux, f * uy
    return f * dx / distance, f * dy / distance


def apply_attraction(nodes: Sequence[Node], edges: Sequence[Tuple[int, int]],
                     config: LayoutConfig) -> None:
    for s, t in edges:
        src, dst = nodes[s], nodes[t]
        fx, fy = spring_force(src, dst, s, t, config)
        dst.fx += fx
        dst.fy += fy
        src.fx -= fx
        src.fy -= fy


def compute_forces(
    nodes: Sequence[Node],
    edges: Sequence[Tuple[int, int]],
    tree: QuadTree,
    config: LayoutConfig,
    executor: Optional[Executor] = None,
) -> List[Force]:
    """計算並寫入每個節點的合力。

    Args:
        nodes: 所有節點。
        edges: 以節點索引表示的邊 ``(source, target)``。
        tree: 本次迭代的四分樹。
        config: 佈局參數。
        executor: 選用的執行緒池。

    Returns:
        List[Force]: 依節點順序的合力。
    """
    for node, (fx, fy) in zip(nodes, compute_repulsion(nodes, tree, config, executor)):
        node.fx = fx
        node.fy = fy
    apply_attraction(nodes, edges, config)
    return [(node.fx, node.fy) for node in nodes]
