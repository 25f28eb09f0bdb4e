"""
初始位置配置
Initial Placement

將節點放進單位正方形：隨機放置，或把呼叫端提供的座標正規化。
"""

import math
from typing import Optional, Sequence

import numpy as np

from .config import EPSILON, LayoutConfig
from .model import Node

_GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def place_randomly(nodes: Sequence[Node], rng: np.random.Generator) -> None:
    """隨機放置於 (0, 0) ~ (1, 1) 之間。

    只有一個節點時放在正中央；否則第一個節點固定在 (0.5, 0.5)，
    第二個在 (1.0, 1.0)，其餘隨機。
    """
    for i, node in enumerate(nodes):
        if i == 0:
            node.x, node.y = 0.5, 0.5
        elif i == 1:
            node.x, node.y = 1.0, 1.0
        else:
            node.x, node.y = (float(v) for v in rng.random(2))


def place_spiral(nodes: Sequence[Node]) -> None:
    """以黃金角螺旋排列於單位正方形內，結果固定可重現"""
    n = len(nodes)
    if n == 1:
        nodes[0].x, nodes[0].y = 0.5, 0.5
        return
    for i, node in enumerate(nodes):
        radius = 0.5 * math.sqrt((i + 0.5) / n)
        angle = i * _GOLDEN_ANGLE
        node.x = 0.5 + radius * math.cos(angle)
        node.y = 0.5 + radius * math.sin(angle)


def convert_to_unit_coordinates(nodes: Sequence[Node]) -> None:
    """將呼叫端提供的座標正規化到單位正方形。

    各軸分別縮放；跨距過小的軸向設為 0.5。沒有提供座標的節點，
    或所有座標都重合時，改用螺旋排列。
    """
    placed = [node for node in nodes if node.initial is not None]
    missing = [node for node in nodes if node.initial is None]

    if placed:
        xs = [node.initial[0] for node in placed]
        ys = [node.initial[1] for node in placed]
        min_x, min_y = min(xs), min(ys)
        span_x = max(xs) - min_x
        span_y = max(ys) - min_y
        if max(span_x, span_y) > EPSILON:
            for node in placed:
                px, py = node.initial
                node.x = (px - min_x) / span_x if span_x > EPSILON else 0.5
                node.y = (py - min_y) / span_y if span_y > EPSILON else 0.5
        else:
            missing = list(nodes)

    if missing:
        place_spiral(missing)


def initialize(
    nodes: Sequence[Node],
    config: LayoutConfig,
    rng: Optional[np.random.Generator] = None,
) -> None:
    """依設定產生起始位置，並清除上一次的合力"""
    if config.randomize_initial:
        place_randomly(nodes, rng if rng is not None else np.random.default_rng(config.seed))
    else:
        convert_to_unit_coordinates(nodes)
    for node in nodes:
        node.reset_force()
