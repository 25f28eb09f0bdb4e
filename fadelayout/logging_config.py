"""
日誌設定
Logging Configuration

佈局套件的 logger 都在 'fadelayout' 命名空間下。引擎每次迭代的位移量
以 DEBUG 輸出，數量可能上千筆，因此只在 verbose 模式下才開啟。
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "fadelayout"
ITERATION_LOGGER = "fadelayout.engine"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    設定佈局套件的日誌輸出。

    Args:
        level: 套件整體的日誌等級
        log_file: 選用的日誌檔路徑，內容與 stderr 相同
        verbose: True 時額外輸出引擎每次迭代的最大位移

    Returns:
        logging.Logger: 'fadelayout' 套件 logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    iteration_logger = logging.getLogger(ITERATION_LOGGER)

    # 逐次迭代的訊息只由引擎 logger 放行，其餘模組維持套件等級
    package_logger.setLevel(level)
    iteration_logger.setLevel(logging.DEBUG if verbose else logging.NOTSET)
    handler_level = min(level, logging.DEBUG) if verbose else level

    # 重複呼叫（例如測試或多次執行 main）時不累積 handler
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug("日誌已初始化 (verbose=%s)", verbose)
    return package_logger
