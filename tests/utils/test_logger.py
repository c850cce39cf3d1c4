#!filepath: tests/utils/test_logger.py
import pytest

from barledger import logs
from barledger.config.log_config import LogConfig
from barledger.utils.logger import init_logging


def test_init_logging_reconfigures_shared_instance(tmp_path):
    cfg = LogConfig(dir=str(tmp_path / "logs"), level="debug")

    returned = init_logging(cfg)

    assert returned is logs
    assert logs.level == "DEBUG"
    assert (tmp_path / "logs").is_dir()


def test_catch_reraises():
    @logs.catch("boom", log_time=False)
    def explode():
        raise ZeroDivisionError

    with pytest.raises(ZeroDivisionError):
        explode()


def test_catch_returns_value():
    @logs.catch()
    def add(a, b):
        return a + b

    assert add(1, 2) == 3
    assert add.__name__ == "add"
