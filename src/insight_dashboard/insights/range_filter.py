"""
日期范围过滤与聚合
供词云 / 热力图 / 列表视图使用：按预设或自定义时间窗口筛选已映射的洞察，
再按话题汇总提及数

与映射层不同，预设窗口以当前时间为基准。
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .dates import to_datetime
from .timeline import parse_timeline_label


# 预设窗口：名称 → 向前回溯的时长（月 / 年按日历计算）
PRESET_OFFSETS = {
    "1D": pd.DateOffset(days=1),
    "3D": pd.DateOffset(days=3),
    "7D": pd.DateOffset(days=7),
    "1M": pd.DateOffset(months=1),
    "3M": pd.DateOffset(months=3),
    "6M": pd.DateOffset(months=6),
    "1Y": pd.DateOffset(years=1),
}
PRESET_ALL = "ALL"
PRESET_CUSTOM = "CUSTOM"

DEFAULT_TOP_N = 30


@dataclass(frozen=True)
class DateWindow:
    """
    时间窗口（闭区间）

    start / end 为 None 表示该方向不设限
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """范围 [start, end] 是否与窗口相交（边界相等也算相交）"""
        if self.end is not None and start > self.end:
            return False
        if self.start is not None and end < self.start:
            return False
        return True

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


def preset_window(preset: str, now: Optional[datetime] = None) -> DateWindow:
    """
    根据预设名称生成时间窗口

    Args:
        preset: "1D" / "3D" / "7D" / "1M" / "3M" / "6M" / "1Y" / "ALL"（不区分大小写）
        now: 基准时间（默认当前 UTC 时间）

    Raises:
        ValueError: 不支持的预设名称
    """
    key = preset.upper()
    if key == PRESET_ALL:
        return DateWindow()

    offset = PRESET_OFFSETS.get(key)
    if offset is None:
        raise ValueError(
            f"不支持的时间范围: {preset}。支持: {', '.join(list(PRESET_OFFSETS) + [PRESET_ALL])}"
        )

    end = to_datetime(now) if now is not None else datetime.now(timezone.utc)
    start = (pd.Timestamp(end) - offset).to_pydatetime()
    return DateWindow(start=start, end=end)


def custom_window(start: Any, end: Any) -> Optional[DateWindow]:
    """
    自定义时间窗口

    任一端无法解析或 start > end 时返回 None（过滤结果为空）
    """
    start_dt, end_dt = to_datetime(start), to_datetime(end)
    if start_dt is None or end_dt is None or start_dt > end_dt:
        return None
    return DateWindow(start=start_dt, end=end_dt)


def filter_by_window(insights: Iterable[Mapping[str, Any]], window: Optional[DateWindow]) -> List[Mapping[str, Any]]:
    """
    保留时间线与窗口相交的洞察

    时间线为 "Unknown date" 或无法解析的洞察总是被排除，不做猜测。
    window 为 None（非法的自定义窗口）时返回空列表。
    """
    if window is None:
        return []

    kept = []
    for insight in insights:
        timeline = parse_timeline_label(insight.get("Timeline"))
        if timeline is None:
            continue
        if window.overlaps(timeline.start, timeline.end):
            kept.append(insight)
    return kept


def aggregate_mentions(
    insights: Iterable[Mapping[str, Any]],
    limit: int = DEFAULT_TOP_N,
    min_mentions: int = 0
) -> List[Dict[str, Any]]:
    """
    按话题汇总提及数（词云 / 概要视图）

    Args:
        insights: 已映射的洞察（dict，含 Topic / Mentions）
        limit: 最多返回的话题数
        min_mentions: 汇总后低于该值的话题被丢弃

    Returns:
        [{"Topic": ..., "Mentions": ...}]，按提及数降序；
        话题键区分大小写和空白，同分时保持首次出现的顺序
    """
    rows = [
        {"Topic": insight.get("Topic"), "Mentions": insight.get("Mentions") or 0}
        for insight in insights
    ]
    if not rows or limit <= 0:
        return []

    frame = pd.DataFrame(rows, columns=["Topic", "Mentions"])
    totals = frame.groupby("Topic", sort=False)["Mentions"].sum()
    totals = totals[totals >= min_mentions]
    totals = totals.sort_values(ascending=False, kind="stable").head(limit)

    return [{"Topic": topic, "Mentions": int(count)} for topic, count in totals.items()]
