import argparse
import logging
from pathlib import Path

from fadelayout.config import LayoutConfig, load_settings
from fadelayout.engine import FadeLayoutEngine
from fadelayout.force_directed import node_specs_from_frame
from fadelayout.io import readEdges, readNodes, writePositions
from fadelayout.logging_config import setup_logging

logger = logging.getLogger("fadelayout.main")


def parse_arguments(argv=None):
    """解析命令列參數"""
    parser = argparse.ArgumentParser(description="四分樹彈簧佈局工具")
    parser.add_argument("--nodes", required=True, help="節點 CSV 檔案路徑")
    parser.add_argument("--edges", help="邊 CSV 檔案路徑")
    parser.add_argument("--config", default="config.json", help="設定檔路徑")
    parser.add_argument(
        "--output", default="layout_positions.csv", help="佈局結果輸出路徑")
    parser.add_argument(
        "--bounds", nargs=4, type=float, metavar=("X", "Y", "W", "H"),
        help="目標矩形 (預設取自設定檔 layout_bounds)")
    parser.add_argument(
        "--iterations", type=int, help="覆寫最大迭代次數")
    parser.add_argument("--seed", type=int, help="隨機放置的亂數種子")
    parser.add_argument(
        "--no-random", dest="noRandom", action="store_true",
        help="使用節點檔中的 X、Y 作為初始座標")
    parser.add_argument(
        "--verbose", action="store_true", help="輸出每次迭代的除錯訊息")
    parser.add_argument("--log-file", dest="logFile", help="日誌檔路徑")
    return parser.parse_args(argv)


def load_data(args):
    """載入所有輸入資料"""
    nodes = readNodes(args.nodes)
    edges = readEdges(args.edges) if args.edges else []
    config_path = Path(args.config)
    if config_path.exists():
        config, bounds = load_settings(config_path)
    else:
        logger.warning("找不到設定檔 %s，使用預設參數", config_path)
        config, bounds = LayoutConfig(), {}
    return nodes, edges, config, bounds


def build_config(args, config: LayoutConfig) -> LayoutConfig:
    """以命令列參數覆寫設定檔參數"""
    changes = {}
    if args.iterations is not None:
        changes['iterations'] = args.iterations
    if args.seed is not None:
        changes['seed'] = args.seed
    if args.noRandom:
        changes['randomize_initial'] = False
    return config.replace(**changes) if changes else config


def resolve_bounds(args, bounds: dict):
    if args.bounds:
        return tuple(args.bounds)
    return (
        bounds.get('x', 0.0),
        bounds.get('y', 0.0),
        bounds.get('width', 600.0),
        bounds.get('height', 400.0),
    )


def main(argv=None):
    """主執行流程"""
    args = parse_arguments(argv)
    setup_logging(logging.INFO, args.logFile, verbose=args.verbose)
    nodes, edges, config, bounds = load_data(args)
    config = build_config(args, config)

    def report(iteration, total):
        if iteration % 100 == 0:
            print(f"迭代進度：{iteration}/{total}")

    result = FadeLayoutEngine(config).run(
        node_specs_from_frame(nodes), edges, resolve_bounds(args, bounds), progress=report)
    writePositions(result.positions, args.output)
    status = "已收斂" if result.converged else "已達迭代上限"
    print(f"{status}：共 {result.iterations} 次迭代")
    print(f"已輸出 {Path(args.output).name}")
    return result


if __name__ == "__main__":
    main()
