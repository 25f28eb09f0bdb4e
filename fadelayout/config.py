"""
佈局參數設定
Layout Configuration

每次佈局執行各自擁有一份不可變的參數，不使用類別層級的共用狀態，
因此不同執行緒上的多個佈局可同時進行而互不干擾。
"""

import json
from dataclasses import asdict, dataclass, fields, replace as _replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

DEFAULT_ITERATIONS = 1000
DEFAULT_RANDOMIZE = True
DEFAULT_MOVE = 1.9
DEFAULT_STRAIN = 0.5
DEFAULT_LENGTH = 2.8
DEFAULT_GRAVITATION = 0.3
DEFAULT_OPENING_ANGLE = 0.5
DEFAULT_CONVERGENCE_THRESHOLD = 0.01

# 節點間最小距離，避免距離趨近 0 時力量爆增
MIN_DISTANCE = 1.0
# 數學上的極小值
EPSILON = 0.001
# 四分樹最大分割深度，超過後重合的節點合併為同一個葉節點
MAX_DEPTH = 48

# config.json 中的 camelCase 名稱
_ALIASES = {
    "randomizeInitial": "randomize_initial",
    "moveFactor": "move_factor",
    "restLength": "rest_length",
    "openingAngle": "opening_angle",
    "convergenceThreshold": "convergence_threshold",
    "minDistance": "min_distance",
    "maxDepth": "max_depth",
}


@dataclass(frozen=True)
class LayoutConfig:
    """力導向佈局參數

    Attributes:
        iterations: 最大迭代次數，必須為正整數
        randomize_initial: True 時隨機放置節點，否則縮放呼叫端提供的座標
        move_factor: 每次迭代的位移倍率
        strain: 彈簧剛性係數
        rest_length: 邊的自然長度
        gravitation: 排斥力強度
        opening_angle: Barnes-Hut 近似門檻（格寬 / 距離）
        convergence_threshold: 最大位移低於此值即視為收斂
        min_distance: 計算力量時的距離下限
        max_depth: 四分樹最大分割深度
        seed: 隨機放置的亂數種子
        workers: 計算排斥力的執行緒數
    """
    iterations: int = DEFAULT_ITERATIONS
    randomize_initial: bool = DEFAULT_RANDOMIZE
    move_factor: float = DEFAULT_MOVE
    strain: float = DEFAULT_STRAIN
    rest_length: float = DEFAULT_LENGTH
    gravitation: float = DEFAULT_GRAVITATION
    opening_angle: float = DEFAULT_OPENING_ANGLE
    convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD
    min_distance: float = MIN_DISTANCE
    max_depth: int = MAX_DEPTH
    seed: Optional[int] = None
    workers: int = 1

    def __post_init__(self):
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int):
            raise ValueError(f"iterations 必須為整數：{self.iterations!r}")
        if self.iterations <= 0:
            raise ValueError(f"iterations 必須為正數：{self.iterations}")
        if self.move_factor <= 0:
            raise ValueError("move_factor 必須大於 0")
        if self.rest_length <= 0:
            raise ValueError("rest_length 必須大於 0")
        if self.min_distance <= 0:
            raise ValueError("min_distance 必須大於 0")
        if self.gravitation < 0 or self.strain < 0:
            raise ValueError("gravitation 與 strain 不能為負數")
        if self.opening_angle < 0:
            raise ValueError("opening_angle 不能為負數")
        if self.convergence_threshold < 0:
            raise ValueError("convergence_threshold 不能為負數")
        if self.max_depth < 1:
            raise ValueError("max_depth 必須至少為 1")
        if self.workers < 1:
            raise ValueError("workers 必須至少為 1")

    @property
    def max_movement(self) -> float:
        """單一軸向每次迭代允許的最大位移"""
        return 10.0 * self.move_factor

    @classmethod
    def defaults(cls) -> "LayoutConfig":
        return cls()

    def replace(self, **changes: Any) -> "LayoutConfig":
        return _replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, params: Optional[Mapping[str, Any]]) -> "LayoutConfig":
        """由設定字典建立參數，接受 snake_case 與 camelCase 鍵名。

        Args:
            params: 設定字典，通常為 config.json 的 ``layout_params`` 區段。

        Returns:
            LayoutConfig: 驗證後的參數。
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        unknown = []
        for key, value in (params or {}).items():
            name = _ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            kwargs[name] = value
        if unknown:
            raise ValueError(f"未知的佈局參數：{', '.join(unknown)}")
        return cls(**kwargs)


def _read_json(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_config(path: Union[str, Path], section: str = "layout_params") -> LayoutConfig:
    """讀取 JSON 設定檔中的佈局參數"""
    return LayoutConfig.from_dict(_read_json(path).get(section, {}))


def load_settings(path: Union[str, Path]) -> Tuple[LayoutConfig, Dict[str, Any]]:
    """讀取設定檔的 ``layout_params`` 與 ``layout_bounds`` 兩個區段。

    Returns:
        Tuple[LayoutConfig, Dict[str, Any]]: 佈局參數與目標矩形設定（未提供時為空字典）。
    """
    raw = _read_json(path)
    config = LayoutConfig.from_dict(raw.get("layout_params", {}))
    return config, dict(raw.get("layout_bounds", {}))
