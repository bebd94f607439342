"""
日期解析模块
把存储文档中各种形态的时间（epoch 秒 / 毫秒、ISO 字符串、datetime）统一成 UTC datetime

所有函数都不抛异常：无法解析时返回 None，调用方把 None 当作"缺失"处理，
绝不能当作 epoch 0 或当前时间。
"""

import math
import numbers
import re
import warnings
from datetime import date, datetime, timezone
from typing import Any, Optional

import pandas as pd


# 小于该值按秒处理，否则按毫秒处理（13 位数字一般是毫秒）
EPOCH_MILLIS_THRESHOLD = 1_000_000_000_000

GRANULARITY_HOUR = "hour"
GRANULARITY_DAY = "day"

# 字符串必须包含完整的年月日才解析：2024-01-05、2024/1/5、01/05/2024、Jan 5, 2024、5 January 2024
_FULL_DATE = re.compile(
    r"\d{4}[-/.]\d{1,2}[-/.]\d{1,2}"
    r"|\d{1,2}[-/.]\d{1,2}[-/.]\d{4}"
    r"|[A-Za-z]{3,}\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}"
    r"|\d{1,2}\s+[A-Za-z]{3,}\.?,?\s+\d{4}"
)


def _as_utc(value: datetime) -> datetime:
    """naive datetime 视为 UTC，aware datetime 转换到 UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_number(value) -> Optional[datetime]:
    try:
        value = float(value)
    except (OverflowError, ValueError, TypeError):
        return None
    if not math.isfinite(value) or value == 0:
        return None

    seconds = value / 1000 if value >= EPOCH_MILLIS_THRESHOLD else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse(text: str, **kwargs):
    with warnings.catch_warnings():
        # 模糊格式（如 01/02/2024）pandas 会给出 UserWarning，这里不需要
        warnings.simplefilter("ignore")
        return pd.to_datetime(text, utc=True, errors="coerce", **kwargs)


def _from_string(value: str) -> Optional[datetime]:
    text = value.strip()
    # 缺少年月日的字符串（"10:00"、"March"）会被 pandas 补成今天或公元 1 年
    if not text or not _FULL_DATE.search(text):
        return None

    try:
        parsed = _parse(text, format="ISO8601")
        if pd.isna(parsed):
            parsed = _parse(text)
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    return _as_utc(parsed.to_pydatetime())


def to_datetime(value: Any) -> Optional[datetime]:
    """
    把任意值解析为 UTC datetime

    Args:
        value: datetime / date / 数字（epoch 秒或毫秒）/ 字符串 / 其他

    Returns:
        UTC aware datetime，无法解析时返回 None

    Examples:
        to_datetime(1704448800)           # epoch 秒
        to_datetime(1704448800000)        # epoch 毫秒
        to_datetime("2024-01-05T10:00Z")  # ISO 字符串
        to_datetime("not a date")         # None
    """
    if value is None or value is pd.NaT:
        return None

    # bool 是 int 的子类，但不是时间
    if isinstance(value, bool):
        return None

    if isinstance(value, pd.Timestamp):
        return _as_utc(value.to_pydatetime())

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, numbers.Real):
        return _from_number(value)

    if isinstance(value, str):
        return _from_string(value)

    return None


def truncate(value: datetime, granularity: str = GRANULARITY_HOUR) -> datetime:
    """把时间截断到整点或当天 0 点"""
    if granularity == GRANULARITY_HOUR:
        return value.replace(minute=0, second=0, microsecond=0)
    if granularity == GRANULARITY_DAY:
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    raise ValueError(f"不支持的时间粒度: {granularity}。支持: hour, day")


# ========== 格式化 ==========

def format_day(value: Any) -> Optional[str]:
    """格式化为 YYYY-MM-DD（UTC），无法解析返回 None"""
    dt = to_datetime(value)
    if dt is None:
        return None
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"


def format_hour(value: Any) -> Optional[str]:
    """格式化为 YYYY-MM-DDTHH:00:00Z（UTC），无法解析返回 None"""
    dt = to_datetime(value)
    if dt is None:
        return None
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}T{dt.hour:02d}:00:00Z"


def format_bucket(value: datetime, granularity: str) -> str:
    """按粒度格式化分桶标签"""
    if granularity == GRANULARITY_HOUR:
        return format_hour(value)
    return format_day(value)


def format_display_date(value: Any) -> Optional[str]:
    """格式化为列表展示用的 MM/DD/YYYY，无法解析返回 None"""
    dt = to_datetime(value)
    if dt is None:
        return None
    return f"{dt.month:02d}/{dt.day:02d}/{dt.year:04d}"
