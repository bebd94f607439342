"""
洞察映射模块
把存储中的原始洞察 / 过滤洞察转换为前端统一使用的结构

纯函数：输出只由输入决定，不读取当前时间，不修改输入。
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import fields
from .mentions import MentionBucket, count_mentions, daily_mentions, hourly_mentions
from .timeline import resolve_filtered_timeline, resolve_raw_timeline


UNKNOWN_TOPIC = "Unknown topic"


@dataclass
class MappedInsight:
    """
    前端使用的统一洞察结构

    字段说明:
    - topic: 话题
    - timeline: 时间线标签，无法解析时为 "Unknown date"
    - mentions: 提及数（>= 0）
    - hourly_mentions: 按小时分桶的直方图（可选）
    - daily_mentions: 按天分桶的直方图（可选）
    - filter_type: 生成该子集的过滤器名称（仅过滤洞察）
    - filter_criteria: 过滤条件原样透传（仅过滤洞察）
    """
    topic: str
    timeline: str
    mentions: int
    hourly_mentions: Optional[List[MentionBucket]] = None
    daily_mentions: Optional[List[MentionBucket]] = None
    filter_type: Optional[str] = None
    filter_criteria: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """序列化为 API 输出格式，省略值为 None 的可选字段"""
        result: Dict[str, Any] = {
            "Topic": self.topic,
            "Timeline": self.timeline,
            "Mentions": self.mentions,
        }
        if self.hourly_mentions is not None:
            result["HourlyMentions"] = [b.to_dict() for b in self.hourly_mentions]
        if self.daily_mentions is not None:
            result["DailyMentions"] = [b.to_dict() for b in self.daily_mentions]
        if self.filter_type is not None:
            result["FilterType"] = self.filter_type
        if self.filter_criteria is not None:
            result["FilterCriteria"] = self.filter_criteria
        return result


def resolve_topic(insight: Any) -> str:
    return fields.TOPIC.resolve(insight) or UNKNOWN_TOPIC


def map_raw_insight(insight: Any, include_daily: bool = False) -> MappedInsight:
    """
    映射一条原始洞察

    Args:
        insight: 存储中的原始洞察（字段可能缺失或命名不一致）
        include_daily: 是否附带按天分桶的直方图

    Returns:
        MappedInsight，始终带 HourlyMentions
    """
    return MappedInsight(
        topic=resolve_topic(insight),
        timeline=resolve_raw_timeline(insight).label,
        mentions=count_mentions(insight),
        hourly_mentions=hourly_mentions(insight),
        daily_mentions=daily_mentions(insight) if include_daily else None,
    )


def map_filtered_insight(insight: Any, include_daily: bool = False) -> MappedInsight:
    """
    映射一条过滤洞察

    FilterType / FilterCriteria 原样透传（深拷贝，避免输出与存储文档共享可变对象）。
    """
    criteria = fields.FILTER_CRITERIA.resolve(insight)

    return MappedInsight(
        topic=resolve_topic(insight),
        timeline=resolve_filtered_timeline(insight).label,
        mentions=count_mentions(insight),
        daily_mentions=(
            daily_mentions(insight, resolve_filtered_timeline) if include_daily else None
        ),
        filter_type=fields.FILTER_TYPE.resolve(insight),
        filter_criteria=copy.deepcopy(criteria) if criteria is not None else None,
    )


def map_insights(insights: Any, mapper, include_daily: bool = False) -> List[MappedInsight]:
    """批量映射；集合不是列表时视为空"""
    if not isinstance(insights, (list, tuple)):
        return []
    return [mapper(insight, include_daily=include_daily) for insight in insights]
