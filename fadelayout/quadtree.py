"""
四分樹空間索引
Quad-Tree Spatial Index

將目前的節點位置遞迴切分成四個象限，並在每個格子記錄佔用數與重心，
供 Barnes-Hut 近似計算排斥力使用。

格子以「陣列 + 整數索引」方式保存（arena），父子關係只記錄索引，
不產生物件循環參照。四分樹每次迭代都從頭重建，不做跨迭代的增量更新。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .config import EPSILON, MAX_DEPTH
from .model import Node, Rect

# 子格順序
NW, NE, SE, SW = range(4)


@dataclass
class Cell:
    """四分樹格子

    ``(x, y)`` 為左下角，格子皆為正方形。葉節點的 ``occupants`` 通常只有
    一個節點；只有在達到最大深度（節點重合）時才會合併多個節點。
    """
    x: float
    y: float
    size: float
    parent: int = -1
    depth: int = 0
    children: Optional[Tuple[int, int, int, int]] = None
    occupants: List[int] = field(default_factory=list)
    count: int = 0
    cx: float = 0.0
    cy: float = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def is_empty(self) -> bool:
        return self.children is None and not self.occupants

    def contains(self, px: float, py: float) -> bool:
        return (self.x <= px <= self.x + self.size
                and self.y <= py <= self.y + self.size)

    def quadrant(self, px: float, py: float) -> int:
        """回傳點所在的子格；落在分割線上時固定偏向西北"""
        half = self.size / 2
        east = px > self.x + half
        north = py >= self.y + half
        if north:
            return NE if east else NW
        return SE if east else SW


def bounds_for(nodes: Sequence[Node], padding: float = 0.01) -> Rect:
    """計算涵蓋所有節點工作座標的正方形根格範圍"""
    if not nodes:
        return Rect(0.0, 0.0, 1.0, 1.0)
    xs = [node.x for node in nodes]
    ys = [node.y for node in nodes]
    min_x, min_y = min(xs), min(ys)
    span = max(max(xs) - min_x, max(ys) - min_y)
    pad = max(span * padding, EPSILON)
    size = span + 2 * pad
    return Rect(min_x - pad, min_y - pad, size, size)


class QuadTree:
    """以 arena 保存格子的四分樹"""

    def __init__(self, max_depth: int = MAX_DEPTH):
        self.max_depth = max_depth
        self.cells: List[Cell] = []
        self._points: Dict[int, Tuple[float, float]] = {}

    @classmethod
    def build(
        cls,
        nodes: Sequence[Node],
        bounds: Optional[Rect] = None,
        max_depth: int = MAX_DEPTH,
    ) -> "QuadTree":
        return cls(max_depth).rebuild(nodes, bounds)

    @property
    def root(self) -> Cell:
        return self.cells[0]

    def __len__(self) -> int:
        return len(self.cells)

    def clear(self) -> None:
        self.cells.clear()
        self._points.clear()

    def reset(self, bounds: Rect) -> None:
        self.clear()
        size = max(bounds.width, bounds.height)
        self.cells.append(Cell(bounds.x, bounds.y, size))

    def rebuild(self, nodes: Sequence[Node], bounds: Optional[Rect] = None) -> "QuadTree":
        """清空後依節點目前位置重建"""
        self.reset(bounds if bounds is not None else bounds_for(nodes))
        for index, node in enumerate(nodes):
            self.insert(index, node.x, node.y)
        return self

    def insert(self, index: int, x: float, y: float) -> None:
        """插入一個節點。

        由根往下找到包含該點的葉格：空格直接佔用；已佔用則一分為四，
        把原佔用者移到對應子格後，從這一格繼續往下插入。達到最大深度時
        將節點合併到同一葉格，確保重合節點不會無限分割。
        """
        self._points[index] = (x, y)
        current = 0
        while True:
            cell = self.cells[current]
            if cell.children is not None:
                current = cell.children[cell.quadrant(x, y)]
                continue
            if not cell.occupants:
                cell.occupants.append(index)
                cell.count = 1
                cell.cx, cell.cy = x, y
                break
            if cell.depth >= self.max_depth:
                cell.occupants.append(index)
                self._summarize_leaf(cell)
                break
            self._split(current)

        self._update_ancestors(cell.parent)

    def _split(self, index: int) -> None:
        cell = self.cells[index]
        half = cell.size / 2
        origins = (
            (cell.x, cell.y + half),         # NW
            (cell.x + half, cell.y + half),  # NE
            (cell.x + half, cell.y),         # SE
            (cell.x, cell.y),                # SW
        )
        first = len(self.cells)
        for ox, oy in origins:
            self.cells.append(Cell(ox, oy, half, parent=index, depth=cell.depth + 1))
        cell.children = (first, first + 1, first + 2, first + 3)

        residents, cell.occupants = cell.occupants, []
        for resident in residents:
            rx, ry = self._points[resident]
            self.cells[cell.children[cell.quadrant(rx, ry)]].occupants.append(resident)
        for child_index in cell.children:
            child = self.cells[child_index]
            if child.occupants:
                self._summarize_leaf(child)

    def _summarize_leaf(self, cell: Cell) -> None:
        cell.count = len(cell.occupants)
        cell.cx = sum(self._points[i][0] for i in cell.occupants) / cell.count
        cell.cy = sum(self._points[i][1] for i in cell.occupants) / cell.count

    def _update_ancestors(self, index: int) -> None:
        # 子格重心依佔用數加權平均
        while index >= 0:
            cell = self.cells[index]
            total = 0
            sx = sy = 0.0
            for child_index in cell.children:
                child = self.cells[child_index]
                if child.count:
                    total += child.count
                    sx += child.cx * child.count
                    sy += child.cy * child.count
            cell.count = total
            cell.cx = sx / total
            cell.cy = sy / total
            index = cell.parent


def build_quadtree(
    nodes: Sequence[Node],
    bounds: Optional[Rect] = None,
    max_depth: int = MAX_DEPTH,
) -> QuadTree:
    return QuadTree.build(nodes, bounds, max_depth)
