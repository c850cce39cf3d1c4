#!filepath: barledger/utils/datetime_utils.py
from __future__ import annotations
import numbers
from datetime import datetime, timedelta, timezone
from typing import Union

import pandas as pd

US_PER_SECOND = 1_000_000
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DateTimeUtils:
    TZ = timezone.utc

    # ================================================================
    # ts_us <-> datetime
    # ================================================================
    @classmethod
    def parse(cls, ts: Union[int, str, datetime]) -> datetime:
        """
        Accepts:
            1704153600000000       # epoch microseconds
            "2024-01-02"           # anything pandas can parse
            datetime(2024, 1, 2)
        """
        if isinstance(ts, datetime):
            return ts.astimezone(cls.TZ) if ts.tzinfo else ts.replace(tzinfo=cls.TZ)

        if isinstance(ts, numbers.Integral):
            return datetime.fromtimestamp(ts / US_PER_SECOND, cls.TZ)

        stamp = pd.Timestamp(ts)
        if stamp.tzinfo is None:
            stamp = stamp.tz_localize(cls.TZ)
        return stamp.to_pydatetime()

    @classmethod
    def to_ts_us(cls, value: Union[int, str, datetime]) -> int:
        if isinstance(value, numbers.Integral):
            return int(value)
        return (cls.parse(value) - EPOCH) // timedelta(microseconds=1)

    @classmethod
    def fmt(cls, ts_us: int) -> str:
        return cls.parse(ts_us).strftime("%Y-%m-%d %H:%M:%S")

    @classmethod
    def index_to_ts_us(cls, index: pd.Index) -> list[int]:
        """
        DatetimeIndex -> list of epoch microseconds (UTC).
        """
        idx = pd.DatetimeIndex(index)
        if idx.tz is None:
            idx = idx.tz_localize(cls.TZ)
        else:
            idx = idx.tz_convert(cls.TZ)
        return [int(v) // 1000 for v in idx.as_unit("ns").asi8]
