"""
力導向佈局介面
Force-Directed Layout Interface

以 DataFrame 描述節點，呼叫四分樹彈簧佈局引擎並回傳 {node_id: (x, y)}。
"""

from typing import Dict, Iterable, Optional, Tuple

import networkx as nx
import pandas as pd

from .config import LayoutConfig
from .engine import FadeLayoutEngine
from .model import nodes_from_graph

NODE_ID_COLUMN = "Node ID"


def node_specs_from_frame(nodes_df: pd.DataFrame) -> list:
    """將節點資料框轉成引擎接受的節點描述；X、Y 皆有值時附上初始座標"""
    if NODE_ID_COLUMN not in nodes_df.columns:
        raise ValueError(f"節點資料缺少 {NODE_ID_COLUMN} 欄位")
    has_xy = "X" in nodes_df.columns and "Y" in nodes_df.columns
    specs = []
    for _, row in nodes_df.iterrows():
        node_id = str(row[NODE_ID_COLUMN])
        if has_xy and pd.notna(row["X"]) and pd.notna(row["Y"]):
            specs.append((node_id, (float(row["X"]), float(row["Y"]))))
        else:
            specs.append(node_id)
    return specs


def layout_force_directed(
    nodes_df: pd.DataFrame,
    edges: Optional[Iterable[Tuple[str, str]]] = None,
    *,
    bounds: Tuple[float, float, float, float] = (0.0, 0.0, 600.0, 400.0),
    config: Optional[LayoutConfig] = None,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
) -> Dict[str, Tuple[float, float]]:
    """
    計算力導向佈局的節點位置。

    節點間以反平方排斥力互相推開（四分樹 Barnes-Hut 近似），
    有邊相連的節點以對數彈簧拉到自然長度附近。

    Args:
        nodes_df: 節點資料框，需包含 "Node ID" 欄位，可選 "X"、"Y" 初始座標
        edges: 邊的集合，格式為 {(src_id, dst_id), ...}
        bounds: 目標矩形 (x, y, width, height)
        config: 佈局參數，省略時使用預設值
        iterations: 覆寫迭代次數
        seed: 覆寫隨機種子，確保結果可重現

    Returns:
        節點位置字典 {node_id: (x, y)}
    """
    config = config if config is not None else LayoutConfig()
    changes = {}
    if iterations is not None:
        changes["iterations"] = iterations
    if seed is not None:
        changes["seed"] = seed
    if changes:
        config = config.replace(**changes)

    specs = node_specs_from_frame(nodes_df)
    edge_list = [(str(src), str(dst)) for src, dst in (edges or ())]
    result = FadeLayoutEngine(config).run(specs, edge_list, bounds)
    return {node_id: (float(x), float(y)) for node_id, (x, y) in result.positions.items()}


def layout_graph(
    graph: nx.Graph,
    *,
    bounds: Tuple[float, float, float, float] = (0.0, 0.0, 600.0, 400.0),
    config: Optional[LayoutConfig] = None,
) -> Dict:
    """對 NetworkX 圖做佈局；節點的 ``pos`` 屬性作為初始座標"""
    nodes, edges = nodes_from_graph(graph)
    return FadeLayoutEngine(config).run(nodes, edges, bounds).positions
