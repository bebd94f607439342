"""
时间线解析模块
为每条洞察确定代表日期（或日期范围），并生成展示标签

回退链（第一个成功的胜出）：
- 原始洞察: date → mentions 中最新的 date_posted → "Unknown date"
- 过滤洞察: date/filter_date/filtered_at/generated_at → filter_criteria.date_range
            → updated_at/created_at → 原始洞察的回退链
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from . import fields
from .dates import GRANULARITY_DAY, format_day, format_display_date, to_datetime, truncate


UNKNOWN_DATE = "Unknown date"
RANGE_SEPARATOR = " - "


@dataclass(frozen=True)
class Timeline:
    """
    解析后的时间线

    字段说明:
    - label: 展示标签（YYYY-MM-DD、"YYYY-MM-DD - YYYY-MM-DD" 或 "Unknown date"）
    - start: 范围起点（当天 0 点 UTC），未解析时为 None
    - end: 范围终点（当天 0 点 UTC），未解析时为 None
    """
    label: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def resolved(self) -> bool:
        return self.start is not None and self.end is not None

    @classmethod
    def unknown(cls) -> 'Timeline':
        return cls(UNKNOWN_DATE)

    @classmethod
    def single(cls, value: datetime) -> 'Timeline':
        day = truncate(value, GRANULARITY_DAY)
        return cls(format_day(day), day, day)

    @classmethod
    def span(cls, start: datetime, end: datetime) -> 'Timeline':
        """两个日期组成的范围，同一天时折叠成单日"""
        first = truncate(min(start, end), GRANULARITY_DAY)
        last = truncate(max(start, end), GRANULARITY_DAY)
        if first == last:
            return cls.single(first)
        return cls(f"{format_day(first)}{RANGE_SEPARATOR}{format_day(last)}", first, last)


def latest_mention_date(insight: Any) -> Optional[datetime]:
    """mentions 中最新的发帖时间，没有可解析的时间时返回 None"""
    latest = None
    for mention in fields.get_mentions(insight):
        candidate = fields.MENTION_DATE.resolve(mention)
        if candidate is not None and (latest is None or candidate > latest):
            latest = candidate
    return latest


def resolve_raw_timeline(insight: Any) -> Timeline:
    """解析原始洞察的时间线"""
    direct = fields.INSIGHT_DATE.resolve(insight)
    if direct is not None:
        return Timeline.single(direct)

    latest = latest_mention_date(insight)
    if latest is not None:
        return Timeline.single(latest)

    return Timeline.unknown()


def resolve_date_range(date_range: Any) -> Optional[Timeline]:
    """
    解析 filter_criteria.date_range

    支持 [start, end] 序列和 {"start": ..., "end": ...} 两种形态；
    只有一端可解析时退化为单日。
    """
    if isinstance(date_range, Mapping):
        start_value, end_value = date_range.get("start"), date_range.get("end")
    elif isinstance(date_range, (list, tuple)) and date_range:
        start_value = date_range[0]
        end_value = date_range[1] if len(date_range) > 1 else None
    else:
        return None

    start, end = to_datetime(start_value), to_datetime(end_value)
    if start is not None and end is not None:
        return Timeline.span(start, end)
    if start is not None or end is not None:
        return Timeline.single(start or end)
    return None


def resolve_filtered_timeline(insight: Any) -> Timeline:
    """解析过滤洞察的时间线"""
    if not isinstance(insight, Mapping):
        return Timeline.unknown()

    direct = fields.FILTERED_DATE.resolve(insight)
    if direct is not None:
        return Timeline.single(direct)

    criteria = fields.FILTER_CRITERIA.resolve(insight)
    if criteria:
        from_range = resolve_date_range(criteria.get("date_range"))
        if from_range is not None:
            return from_range

    stamped = fields.RECORD_TIMESTAMP.resolve(insight)
    if stamped is not None:
        return Timeline.single(stamped)

    return resolve_raw_timeline(insight)


# ========== 标签反解析（前端范围过滤使用） ==========

def parse_timeline_label(label: Any) -> Optional[Timeline]:
    """
    从 Timeline 标签恢复日期范围

    Returns:
        Timeline 对象；"Unknown date" 或无法解析的标签返回 None
    """
    if not isinstance(label, str) or not label or label == UNKNOWN_DATE:
        return None

    if RANGE_SEPARATOR in label:
        start_text, _, end_text = label.partition(RANGE_SEPARATOR)
        start, end = to_datetime(start_text), to_datetime(end_text)
        if start is None or end is None:
            return None
        return Timeline.span(start, end)

    parsed = to_datetime(label)
    return Timeline.single(parsed) if parsed is not None else None


def format_display_timeline(label: Any) -> str:
    """把 Timeline 标签转换为列表展示格式（MM/DD/YYYY）"""
    timeline = parse_timeline_label(label)
    if timeline is None:
        return UNKNOWN_DATE

    start_text = format_display_date(timeline.start)
    if timeline.start == timeline.end:
        return start_text
    return f"{start_text}{RANGE_SEPARATOR}{format_display_date(timeline.end)}"
