"""
位置積分器
Position Integrator

依合力推進節點位置並限制單步位移，最後把工作座標縮放回目標矩形。
"""

import logging
import math
from typing import Dict, Hashable, Optional, Sequence, Tuple

from .config import EPSILON, LayoutConfig
from .model import Node, Rect

logger = logging.getLogger(__name__)


def _clamp(delta: float, limit: float) -> float:
    if math.isnan(delta):
        return 0.0
    if delta >= 0:
        return min(delta, limit)
    return max(delta, -limit)


def integrate(
    nodes: Sequence[Node],
    forces: Optional[Sequence[Tuple[float, float]]],
    config: LayoutConfig,
) -> float:
    """position += move_factor * force，每軸位移限制在 ±10 * move_factor。

    Args:
        nodes: 所有節點。
        forces: 依節點順序的合力；傳入 ``None`` 時使用節點上的 ``fx``、``fy``。
        config: 佈局參數。

    Returns:
        float: 本次迭代所有節點、所有軸向中最大的位移量。
    """
    limit = config.max_movement
    largest = 0.0
    nan_count = 0
    for i, node in enumerate(nodes):
        fx, fy = forces[i] if forces is not None else (node.fx, node.fy)
        dx = config.move_factor * fx
        dy = config.move_factor * fy
        if math.isnan(dx) or math.isnan(dy):
            nan_count += 1
        dx = _clamp(dx, limit)
        dy = _clamp(dy, limit)
        largest = max(largest, abs(dx), abs(dy))
        node.x += dx
        node.y += dy
    if nan_count:
        logger.warning("有 %d 個節點的合力為 NaN，已視為 0", nan_count)
    return largest


def fit_within_bounds(nodes: Sequence[Node], rect: Rect) -> Dict[Hashable, Tuple[float, float]]:
    """將工作座標線性縮放進目標矩形（各軸分別縮放）。

    跨距小於 ``EPSILON`` 的軸向直接置中。結果同時寫回節點並回傳。
    """
    if not nodes:
        return {}
    xs = [node.x for node in nodes]
    ys = [node.y for node in nodes]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    span_x = max_x - min_x
    span_y = max_y - min_y
    cx, cy = rect.center

    positions = {}
    for node in nodes:
        if span_x > EPSILON:
            node.x = rect.x + (node.x - min_x) / span_x * rect.width
        else:
            node.x = cx
        if span_y > EPSILON:
            node.y = rect.y + (node.y - min_y) / span_y * rect.height
        else:
            node.y = cy
        positions[node.id] = (node.x, node.y)
    return positions
