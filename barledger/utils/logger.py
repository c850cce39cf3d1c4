#!filepath: barledger/utils/logger.py
import os
import sys
from functools import wraps
from time import perf_counter
from typing import Callable, Optional

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"


class Logging:
    """
    Backtest logging (loguru)
    ---------------------------------------
    - one file per day under log_dir, rotated / retained
    - optional stderr sink for interactive runs
    - catch(): run-level timing + exception logging
    ---------------------------------------
    Modules import the shared `logs` instance once; init_logging()
    re-points its sinks in place, so those references stay valid.
    """

    def __init__(
        self,
        log_dir: str = "logs",
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
        console: bool = False,
    ):
        self.configure(
            log_dir=log_dir,
            rotation=rotation,
            retention=retention,
            log_level=log_level,
            console=console,
        )

    def configure(
        self,
        *,
        log_dir: str,
        rotation: str,
        retention: str,
        log_level: str,
        console: bool = False,
    ) -> None:
        """
        Drop every loguru sink and install the file (+ console) sinks.
        """
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level.upper()
        self.console = console

        os.makedirs(self.log_dir, exist_ok=True)

        logger.remove()
        logger.add(
            sink=os.path.join(self.log_dir, "{time:YYYY-MM-DD}.log"),
            rotation=self.rotation,
            retention=self.retention,
            level=self.level,
            format=FILE_FORMAT,
            enqueue=True,
            backtrace=True,
            diagnose=True,
        )
        if self.console:
            logger.add(sink=sys.stderr, level=self.level, format=CONSOLE_FORMAT)

    # ---------- thin wrappers ----------
    def debug(self, msg: str, *args, **kwargs):
        logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        logger.exception(msg, *args, **kwargs)

    # ---------- decorator ----------
    def catch(self, msg: str = "Exception occurred", log_time: bool = True) -> Callable:
        """
        Log the traceback of anything escaping func, then re-raise.
        Ledger errors are never swallowed here.
        """

        def decorator(func: Callable):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start = perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.exception(f"[ERROR] {func.__qualname__}: {msg}")
                    raise

                if log_time:
                    logger.info(f"[TIME] {func.__qualname__} took {perf_counter() - start:.4f}s")
                return result

            return wrapper

        return decorator


def init_logging(cfg, console: bool = False, level: Optional[str] = None) -> Logging:
    """
    Re-point the global `logs` sinks from a LogConfig.
    """
    logs.configure(
        log_dir=cfg.dir,
        rotation=cfg.rotation,
        retention=cfg.retention,
        log_level=level or cfg.level,
        console=console,
    )
    return logs


# shared instance, reconfigured by init_logging
logs = Logging()
