"""
洞察文档数据模型
insights 表（只读）：一行对应一次分析任务针对某个 subreddit 产出的全部洞察
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .dates import to_datetime
from .mapper import MappedInsight


@dataclass
class InsightDocument:
    """
    存储中的洞察文档

    字段说明:
    - id: 文档唯一标识（Supabase 中为 UUID 字符串）
    - subreddit: subreddit 名称（已建索引）
    - raw_insights: 原始洞察列表，每项是结构不固定的 dict
    - filtered_insights: 过滤洞察列表，额外带 filter_type / filter_criteria
    - created_at: 创建时间，用于确定某个 subreddit 的"最新"文档
    - updated_at: 更新时间
    """
    id: str
    subreddit: str
    raw_insights: List[Any] = field(default_factory=list)
    filtered_insights: List[Any] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'InsightDocument':
        """从数据库行构造，集合字段类型不对时视为空"""
        raw = row.get("raw_insights")
        filtered = row.get("filtered_insights")
        return cls(
            id=str(row.get("id")),
            subreddit=row.get("subreddit") or "",
            raw_insights=list(raw) if isinstance(raw, (list, tuple)) else [],
            filtered_insights=list(filtered) if isinstance(filtered, (list, tuple)) else [],
            created_at=to_datetime(row.get("created_at")),
            updated_at=to_datetime(row.get("updated_at")),
        )


class FallbackReason(str, Enum):
    """返回的文档与请求不完全一致的原因"""
    MISSING_ID = "missing-id"
    INVALID_ID = "invalid-id"
    NOT_FOUND = "not-found"
    SUBREDDIT_MISMATCH = "subreddit-mismatch"


@dataclass(frozen=True)
class Fallback:
    """降级命中的说明，调用方据此区分精确命中和回退结果"""
    reason: FallbackReason
    requested_id: Optional[str] = None
    requested_subreddit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"reason": self.reason.value}
        if self.requested_id is not None:
            result["requestedId"] = self.requested_id
        if self.requested_subreddit is not None:
            result["requestedSubreddit"] = self.requested_subreddit
        return result


@dataclass
class InsightQueryResult:
    """洞察查询结果"""
    subreddit: str
    resolved_id: str
    raw_insights: List[MappedInsight] = field(default_factory=list)
    filtered_insights: List[MappedInsight] = field(default_factory=list)
    fallback: Optional[Fallback] = None

    def to_dict(self) -> Dict[str, Any]:
        """序列化为 API 输出格式"""
        result: Dict[str, Any] = {
            "Subreddit": self.subreddit,
            "Raw_insights": [i.to_dict() for i in self.raw_insights],
            "Filtered_Insights": [i.to_dict() for i in self.filtered_insights],
            "Resolved_Id": self.resolved_id,
        }
        if self.fallback is not None:
            result["Fallback"] = self.fallback.to_dict()
        return result
