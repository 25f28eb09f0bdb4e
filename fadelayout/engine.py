"""
佈局引擎
Layout Engine

狀態機：INITIALIZING -> ITERATING -> CONVERGED。每次迭代依序重建四分樹、
計算合力、推進位置；最大位移低於門檻或用完迭代次數即收斂。

每個引擎實例各自擁有節點、四分樹與參數，不同實例可在不同執行緒上
同時執行。取消只在迭代之間檢查，取消後回傳最後一次完成迭代的結果。
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

from .config import LayoutConfig
from .forces import compute_forces
from .initializer import initialize
from .integrator import fit_within_bounds, integrate
from .model import (
    LayoutResult,
    Node,
    Rect,
    build_edges,
    build_nodes,
    edge_indices,
    positions_of,
)
from .quadtree import QuadTree

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class LayoutState(Enum):
    """佈局狀態"""
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"


class FadeLayoutEngine:
    """以四分樹近似排斥力的彈簧佈局引擎"""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config if config is not None else LayoutConfig()
        self.state: Optional[LayoutState] = None
        self.nodes: List[Node] = []
        self.edges: List[Tuple[int, int]] = []
        self.bounds: Optional[Rect] = None
        self.iteration = 0
        self.largest_movement = math.inf

        # 執行期間的暫存資料，只屬於這個實例
        self._tree = QuadTree(self.config.max_depth)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._own_cancel = threading.Event()
        self._cancel = self._own_cancel
        self._progress: Optional[ProgressCallback] = None

    @property
    def total_steps(self) -> int:
        return self.config.iterations

    @property
    def current_step(self) -> int:
        return self.iteration

    @property
    def tree(self) -> QuadTree:
        return self._tree

    def cancel(self) -> None:
        """要求在下一個迭代邊界停止"""
        self._cancel.set()

    def start(
        self,
        nodes: Iterable[Any],
        edges: Iterable[Any] = (),
        bounds: Any = (0.0, 0.0, 1.0, 1.0),
        *,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """驗證輸入並產生起始位置。

        Args:
            nodes: 節點描述，見 ``model.build_nodes``。
            edges: ``(source, target)`` 邊描述。
            bounds: 目標矩形 ``(x, y, width, height)``。
            progress: 每次迭代後呼叫 ``progress(iteration, total)``。
            cancel_event: 外部的取消旗標，設定後於迭代之間停止。
        """
        # 輸入錯誤必須在初始化之前就拋出
        node_list = build_nodes(nodes)
        edge_list = build_edges(edges, node_list)
        rect = Rect.of(bounds)

        self._release()
        self.state = LayoutState.INITIALIZING
        self.nodes = node_list
        self.edges = edge_indices(edge_list, node_list)
        self.bounds = rect
        self.iteration = 0
        self.largest_movement = math.inf if node_list else 0.0
        # 在 start() 之前呼叫的 cancel() 仍然有效
        self._cancel = cancel_event if cancel_event is not None else self._own_cancel
        self._progress = progress

        initialize(self.nodes, self.config)
        if self.config.workers > 1 and len(self.nodes) > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.workers, thread_name_prefix="fadelayout")

        logger.info("開始佈局：%d 個節點、%d 條邊，最多 %d 次迭代",
                    len(self.nodes), len(self.edges), self.config.iterations)
        self.state = LayoutState.ITERATING

    def _should_continue(self) -> bool:
        return (self.state is LayoutState.ITERATING
                and bool(self.nodes)
                and not self._cancel.is_set()
                and self.iteration < self.config.iterations
                and self.largest_movement >= self.config.convergence_threshold
                and self.largest_movement > 0.0)

    def step(self) -> bool:
        """執行一次迭代。

        Returns:
            bool: 是否還需要下一次迭代。
        """
        if self.state is None or self.state is LayoutState.INITIALIZING:
            raise RuntimeError("必須先呼叫 start() 才能執行迭代")
        if not self._should_continue():
            return False

        self._tree.rebuild(self.nodes)
        forces = compute_forces(self.nodes, self.edges, self._tree, self.config, self._executor)
        self.largest_movement = integrate(self.nodes, forces, self.config)
        self.iteration += 1

        logger.debug("迭代 %d：最大位移 %.6f", self.iteration, self.largest_movement)
        if self._progress is not None:
            self._progress(self.iteration, self.config.iterations)
        return self._should_continue()

    def finish(self) -> LayoutResult:
        """將結果縮放到目標矩形並清除暫存狀態"""
        if self.state is None or self.state is LayoutState.INITIALIZING:
            raise RuntimeError("必須先呼叫 start() 才能取得結果")

        converged = (self.largest_movement < self.config.convergence_threshold
                     or self.largest_movement == 0.0)
        cancelled = (self._cancel.is_set() and not converged
                     and self.iteration < self.config.iterations)
        working = positions_of(self.nodes)
        positions = fit_within_bounds(self.nodes, self.bounds)

        self._release()
        # 取消請求只作用於這一次執行；外部傳入的旗標由呼叫端自行管理
        self._own_cancel.clear()
        self._cancel = self._own_cancel
        self.state = LayoutState.CONVERGED

        if cancelled:
            logger.info("佈局已取消，保留第 %d 次迭代的結果", self.iteration)
        else:
            logger.info("佈局完成：%d 次迭代，最大位移 %.6f",
                        self.iteration, self.largest_movement)
        return LayoutResult(
            positions=positions,
            working_positions=working,
            iterations=self.iteration,
            largest_movement=self.largest_movement,
            converged=converged,
            cancelled=cancelled,
        )

    def run(
        self,
        nodes: Iterable[Any],
        edges: Iterable[Any] = (),
        bounds: Any = (0.0, 0.0, 1.0, 1.0),
        *,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> LayoutResult:
        """執行完整佈局直到收斂、用完迭代次數或被取消"""
        self.start(nodes, edges, bounds, progress=progress, cancel_event=cancel_event)
        try:
            while self.step():
                pass
            return self.finish()
        finally:
            self._release()

    def _release(self) -> None:
        for node in self.nodes:
            node.reset_force()
        self._tree.clear()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._progress = None


def layout(
    nodes: Iterable[Any],
    edges: Iterable[Any] = (),
    bounds: Any = (0.0, 0.0, 1.0, 1.0),
    config: Optional[LayoutConfig] = None,
    **kwargs: Any,
) -> Dict[Hashable, Tuple[float, float]]:
    """以新的引擎執行一次佈局並回傳 ``{id: (x, y)}``"""
    return FadeLayoutEngine(config).run(nodes, edges, bounds, **kwargs).positions
