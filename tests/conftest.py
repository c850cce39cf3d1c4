# tests/conftest.py
from __future__ import annotations

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield
