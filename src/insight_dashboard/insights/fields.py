"""
字段查找表
存储文档随时间积累，字段名不一致（topic / insight，date_posted / data_posted 拼写错误等）。
每个逻辑字段对应一组按优先级排列的候选字段名和一个规范化函数，第一个规范化成功的值胜出。
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .dates import to_datetime


@dataclass(frozen=True)
class FieldLookup:
    """
    逻辑字段定义

    字段说明:
    - name: 逻辑字段名（仅用于日志和调试）
    - candidates: 候选字段名，按优先级排列
    - normalizer: 规范化函数，返回 None 表示该候选值不可用
    """
    name: str
    candidates: Tuple[str, ...]
    normalizer: Callable[[Any], Any]

    def resolve(self, record: Any) -> Optional[Any]:
        """按优先级返回第一个规范化成功的值，全部失败返回 None"""
        if not isinstance(record, Mapping):
            return None

        for field_name in self.candidates:
            if field_name not in record:
                continue
            value = self.normalizer(record[field_name])
            if value is not None:
                return value
        return None


def _non_empty_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _mapping(value: Any) -> Optional[dict]:
    return dict(value) if isinstance(value, Mapping) else None


# ================= 洞察字段 =================

TOPIC = FieldLookup("topic", ("topic", "insight"), _non_empty_string)

# 原始洞察的直接日期
INSIGHT_DATE = FieldLookup("insight_date", ("date",), to_datetime)

# 过滤后洞察的直接日期
FILTERED_DATE = FieldLookup(
    "filtered_date",
    ("date", "filter_date", "filtered_at", "generated_at"),
    to_datetime,
)

# 记录本身的写入时间
RECORD_TIMESTAMP = FieldLookup("record_timestamp", ("updated_at", "created_at"), to_datetime)

# 没有 mentions 时直方图的锚点日期
HISTOGRAM_ANCHOR = FieldLookup(
    "histogram_anchor",
    ("date", "generated_at", "updated_at", "created_at"),
    to_datetime,
)

FILTER_TYPE = FieldLookup("filter_type", ("filter_type",), _string)
FILTER_CRITERIA = FieldLookup("filter_criteria", ("filter_criteria",), _mapping)

# ================= 提及（Mention）字段 =================

MENTION_DATE = FieldLookup(
    "mention_date",
    ("date_posted", "data_posted", "date", "created_at", "timestamp"),
    to_datetime,
)


def get_mentions(record: Any) -> List[Any]:
    """获取 mentions 列表，字段缺失或类型不对时返回空列表"""
    if not isinstance(record, Mapping):
        return []
    mentions = record.get("mentions")
    if isinstance(mentions, (list, tuple)):
        return list(mentions)
    return []
