#!filepath: tests/utils/test_datetime_utils.py
from datetime import datetime, timezone

import pandas as pd

from barledger.utils.datetime_utils import DateTimeUtils

JAN_2 = 1_704_153_600_000_000


def test_to_ts_us_accepts_every_form():
    assert DateTimeUtils.to_ts_us("2024-01-02") == JAN_2
    assert DateTimeUtils.to_ts_us(datetime(2024, 1, 2)) == JAN_2
    assert DateTimeUtils.to_ts_us(datetime(2024, 1, 2, tzinfo=timezone.utc)) == JAN_2
    assert DateTimeUtils.to_ts_us(JAN_2) == JAN_2


def test_microsecond_precision():
    assert DateTimeUtils.to_ts_us("2024-01-02 00:00:00.000001") == JAN_2 + 1


def test_parse_and_fmt():
    assert DateTimeUtils.parse(JAN_2) == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert DateTimeUtils.fmt(JAN_2 + 3_600_000_000) == "2024-01-02 01:00:00"


def test_index_to_ts_us():
    naive = pd.DatetimeIndex(["2024-01-02", "2024-01-03"])
    assert DateTimeUtils.index_to_ts_us(naive) == [JAN_2, JAN_2 + 86_400_000_000]

    shanghai = pd.DatetimeIndex(["2024-01-02 09:00"]).tz_localize("Asia/Shanghai")
    assert DateTimeUtils.index_to_ts_us(shanghai) == [JAN_2 + 3_600_000_000]
