"""節點、邊與佈局結果的 CSV 讀寫"""

from pathlib import Path
from typing import Dict, Hashable, List, Tuple, Union

import pandas as pd

from .force_directed import NODE_ID_COLUMN

PathLike = Union[str, Path]


def readNodes(path: PathLike) -> pd.DataFrame:
    """讀取節點 CSV。

    Args:
        path: 節點檔案路徑，需有 "Node ID" 欄位，可選 "X"、"Y"。

    Returns:
        pd.DataFrame: 節點資料表。
    """
    nodes = pd.read_csv(path, encoding="utf-8-sig", dtype={NODE_ID_COLUMN: str})
    if NODE_ID_COLUMN not in nodes.columns:
        raise ValueError(f"節點檔案缺少 {NODE_ID_COLUMN} 欄位")
    if ("X" in nodes.columns) != ("Y" in nodes.columns):
        raise ValueError("X 與 Y 欄位必須同時提供")
    return nodes


def readEdges(path: PathLike) -> List[Tuple[str, str]]:
    """讀取邊 CSV（Source, Target 欄位）"""
    edges = pd.read_csv(path, encoding="utf-8-sig", dtype=str)
    for col in ("Source", "Target"):
        if col not in edges.columns:
            raise ValueError(f"邊檔案缺少 {col} 欄位")
    return list(zip(edges["Source"], edges["Target"]))


def positionsToFrame(positions: Dict[Hashable, Tuple[float, float]]) -> pd.DataFrame:
    return pd.DataFrame(
        [(node_id, x, y) for node_id, (x, y) in positions.items()],
        columns=[NODE_ID_COLUMN, "X", "Y"],
    )


def writePositions(positions: Dict[Hashable, Tuple[float, float]], path: PathLike) -> None:
    """輸出佈局結果 CSV"""
    positionsToFrame(positions).to_csv(Path(path), index=False, encoding="utf-8-sig")
