"""
佈局資料模型
Layout Data Model

節點、邊與目標矩形的資料結構，以及輸入資料的驗證與轉換。
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx


@dataclass
class Node:
    """佈局節點

    ``x``、``y`` 為工作座標（初始於單位正方形），``fx``、``fy`` 為本次迭代
    累積的合力。``initial`` 為呼叫端提供的原始座標，可為 ``None``。
    """
    id: Hashable
    initial: Optional[Tuple[float, float]] = None
    x: float = 0.0
    y: float = 0.0
    fx: float = 0.0
    fy: float = 0.0

    def reset_force(self) -> None:
        self.fx = 0.0
        self.fy = 0.0


@dataclass(frozen=True)
class Edge:
    """有向邊 (source -> target)"""
    source: Hashable
    target: Hashable


@dataclass(frozen=True)
class Rect:
    """目標佈局矩形，原點為左下角"""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"矩形寬高不可為負數：{self.width} x {self.height}")

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, px: float, py: float) -> bool:
        return (self.x <= px <= self.x + self.width
                and self.y <= py <= self.y + self.height)

    @classmethod
    def of(cls, bounds) -> "Rect":
        """接受 ``Rect``、``(x, y, w, h)`` 或含 x/y/width/height 的字典"""
        if isinstance(bounds, Rect):
            return bounds
        if isinstance(bounds, Mapping):
            return cls(float(bounds["x"]), float(bounds["y"]),
                       float(bounds["width"]), float(bounds["height"]))
        x, y, w, h = bounds
        return cls(float(x), float(y), float(w), float(h))


def _to_node(spec: Any) -> Node:
    if isinstance(spec, Node):
        return Node(spec.id, spec.initial)
    if isinstance(spec, Mapping):
        node_id = spec["id"]
        if spec.get("x") is not None and spec.get("y") is not None:
            return Node(node_id, (float(spec["x"]), float(spec["y"])))
        return Node(node_id)
    if isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[1], (tuple, list)):
        node_id, pos = spec
        return Node(node_id, (float(pos[0]), float(pos[1])))
    return Node(spec)


def build_nodes(specs: Iterable[Any]) -> List[Node]:
    """將呼叫端提供的節點描述轉成 ``Node`` 清單。

    Args:
        specs: 節點描述，可為 id、``(id, (x, y))``、字典或 ``Node``。

    Returns:
        List[Node]: 新建立的節點（不會修改呼叫端的物件）。
    """
    nodes = [_to_node(spec) for spec in specs]
    seen = set()
    duplicates = []
    for node in nodes:
        if node.id in seen:
            duplicates.append(str(node.id))
        seen.add(node.id)
    if duplicates:
        raise ValueError(f"節點 ID 重複：{', '.join(duplicates)}")
    invalid = [str(node.id) for node in nodes
               if node.initial is not None
               and not all(math.isfinite(v) for v in node.initial)]
    if invalid:
        raise ValueError(f"下列節點的座標不是有限數值：{', '.join(invalid)}")
    return nodes


def build_edges(specs: Iterable[Any], nodes: Sequence[Node]) -> List[Edge]:
    """驗證邊並轉成 ``Edge`` 清單。

    Args:
        specs: 邊描述，``(source, target)`` 或 ``Edge``。
        nodes: 已建立的節點。

    Returns:
        List[Edge]: 驗證後的邊。
    """
    edges = [spec if isinstance(spec, Edge) else Edge(spec[0], spec[1])
             for spec in specs]
    if edges and not nodes:
        raise ValueError("節點集合為空時不可提供邊")
    known = {node.id for node in nodes}
    missing = [f"{e.source} -> {e.target}" for e in edges
               if e.source not in known or e.target not in known]
    if missing:
        raise ValueError(f"下列邊引用了不存在的節點：{', '.join(missing)}")
    return edges


def edge_indices(edges: Sequence[Edge], nodes: Sequence[Node]) -> List[Tuple[int, int]]:
    index = {node.id: i for i, node in enumerate(nodes)}
    return [(index[e.source], index[e.target]) for e in edges]


def build_graph(node_specs: Iterable[Any], edge_specs: Iterable[Any] = ()) -> nx.DiGraph:
    """依驗證後的輸入建立依賴圖。

    節點屬性 ``pos`` 保存原始座標（若有提供）。
    """
    nodes = build_nodes(node_specs)
    edges = build_edges(edge_specs, nodes)
    G = nx.DiGraph()
    for node in nodes:
        if node.initial is not None:
            G.add_node(node.id, pos=node.initial)
        else:
            G.add_node(node.id)
    G.add_edges_from((e.source, e.target) for e in edges)
    return G


def nodes_from_graph(G: nx.Graph) -> Tuple[List[Node], List[Edge]]:
    """從 NetworkX 圖取出節點與邊，節點的 ``pos`` 屬性視為初始座標"""
    specs = []
    for node_id, data in G.nodes(data=True):
        pos = data.get("pos")
        specs.append((node_id, tuple(pos)) if pos is not None else node_id)
    nodes = build_nodes(specs)
    edges = build_edges(G.edges(), nodes)
    return nodes, edges


def positions_of(nodes: Sequence[Node]) -> Dict[Hashable, Tuple[float, float]]:
    return {node.id: (node.x, node.y) for node in nodes}


@dataclass
class LayoutResult:
    """佈局結果"""
    positions: Dict[Hashable, Tuple[float, float]]
    working_positions: Dict[Hashable, Tuple[float, float]] = field(default_factory=dict)
    iterations: int = 0
    largest_movement: float = 0.0
    converged: bool = False
    cancelled: bool = False
