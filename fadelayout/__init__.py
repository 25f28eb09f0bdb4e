"""
四分樹彈簧佈局套件
Quad-Tree Spring Layout Package

以物理模擬計算圖形的二維佈局：
- 四分樹索引：Barnes-Hut 近似的排斥力
- 力模型：反平方排斥力 + 對數彈簧引力
- 佈局引擎：迭代、收斂判斷與取消
"""

from .config import LayoutConfig, load_config
from .engine import FadeLayoutEngine, LayoutState, layout
from .force_directed import layout_force_directed, layout_graph
from .model import Edge, LayoutResult, Node, Rect, build_graph
from .quadtree import QuadTree, build_quadtree

__all__ = [
    # 參數
    'LayoutConfig',
    'load_config',

    # 引擎
    'FadeLayoutEngine',
    'LayoutState',
    'LayoutResult',
    'layout',

    # DataFrame / NetworkX 介面
    'layout_force_directed',
    'layout_graph',

    # 資料模型
    'Node',
    'Edge',
    'Rect',
    'build_graph',

    # 四分樹
    'QuadTree',
    'build_quadtree',
]
