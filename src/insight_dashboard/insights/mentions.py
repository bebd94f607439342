"""
提及统计模块
计算洞察的提及数，并把 mentions 按小时 / 按天分桶生成直方图数据
"""

import math
import numbers
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from . import fields
from .dates import GRANULARITY_DAY, GRANULARITY_HOUR, format_bucket, truncate
from .timeline import Timeline, resolve_raw_timeline


@dataclass(frozen=True)
class MentionBucket:
    """直方图中的一个时间桶"""
    date: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "count": self.count}


def count_mentions(insight: Any) -> int:
    """
    计算提及数

    优先级：
    1. num_mentions（数字且 >= 0）
    2. mentions 列表长度
    3. 0
    """
    if isinstance(insight, Mapping):
        declared = _non_negative_count(insight.get("num_mentions"))
        if declared is not None:
            return declared

        mentions = insight.get("mentions")
        if isinstance(mentions, (list, tuple)):
            return len(mentions)

    return 0


def _non_negative_count(value: Any) -> Optional[int]:
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError, TypeError):
        # 超出 float 范围的整数（JSON 中的超长数字）
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return int(value)


def bucket_mentions(
    insight: Any,
    granularity: str = GRANULARITY_HOUR,
    timeline_resolver: Callable[[Any], Timeline] = resolve_raw_timeline,
) -> List[MentionBucket]:
    """
    按时间粒度统计 mentions

    Args:
        insight: 洞察记录
        granularity: "hour" 或 "day"
        timeline_resolver: 没有 mentions 时用于推导锚点日期的时间线解析函数

    Returns:
        按时间升序排列的 MentionBucket 列表，时间桶唯一

    没有 mentions 但能确定日期时，返回一个合成桶，数量为洞察的总提及数，
    避免只有汇总数时图表为空。
    """
    mentions = fields.get_mentions(insight)

    if not mentions:
        anchor = _histogram_anchor(insight, timeline_resolver)
        if anchor is None:
            return []
        bucket = truncate(anchor, granularity)
        return [MentionBucket(format_bucket(bucket, granularity), count_mentions(insight))]

    counts = Counter()
    for mention in mentions:
        posted = fields.MENTION_DATE.resolve(mention)
        if posted is None:
            continue
        counts[truncate(posted, granularity)] += 1

    return [
        MentionBucket(format_bucket(bucket, granularity), count)
        for bucket, count in sorted(counts.items())
    ]


def _histogram_anchor(insight: Any, timeline_resolver: Callable[[Any], Timeline]):
    anchor = fields.HISTOGRAM_ANCHOR.resolve(insight)
    if anchor is not None:
        return anchor

    timeline = timeline_resolver(insight)
    return timeline.end if timeline.resolved else None


def hourly_mentions(insight: Any, timeline_resolver: Optional[Callable[[Any], Timeline]] = None) -> List[MentionBucket]:
    """按小时分桶"""
    return bucket_mentions(insight, GRANULARITY_HOUR, timeline_resolver or resolve_raw_timeline)


def daily_mentions(insight: Any, timeline_resolver: Optional[Callable[[Any], Timeline]] = None) -> List[MentionBucket]:
    """按天分桶"""
    return bucket_mentions(insight, GRANULARITY_DAY, timeline_resolver or resolve_raw_timeline)
