import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest  # noqa: E402
from fadelayout.config import LayoutConfig  # noqa: E402
from fadelayout.engine import FadeLayoutEngine  # noqa: E402
from fadelayout.logging_config import setup_logging  # noqa: E402


@pytest.fixture(autouse=True)
def restore_loggers():
    yield
    package_logger = logging.getLogger("fadelayout")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
    logging.getLogger("fadelayout.engine").setLevel(logging.NOTSET)


def test_iteration_log_is_off_by_default():
    setup_logging()
    assert not logging.getLogger("fadelayout.engine").isEnabledFor(logging.DEBUG)
    assert logging.getLogger("fadelayout.engine").isEnabledFor(logging.INFO)


def test_verbose_enables_only_iteration_log():
    setup_logging(verbose=True)
    assert logging.getLogger("fadelayout.engine").isEnabledFor(logging.DEBUG)
    assert not logging.getLogger("fadelayout.integrator").isEnabledFor(logging.DEBUG)


def test_verbose_iterations_written_to_log_file(tmp_path):
    log_file = tmp_path / "layout.log"
    setup_logging(log_file=str(log_file), verbose=True)
    FadeLayoutEngine(LayoutConfig(iterations=3, convergence_threshold=0.0, seed=1)).run(
        ["a", "b", "c"], [("a", "b")])
    text = log_file.read_text(encoding="utf-8")
    assert "迭代 1：" in text
    assert "迭代 3：" in text
    assert "佈局完成" in text


def test_repeated_setup_replaces_handlers(tmp_path):
    setup_logging()
    setup_logging(log_file=str(tmp_path / "again.log"))
    assert len(logging.getLogger("fadelayout").handlers) == 2
