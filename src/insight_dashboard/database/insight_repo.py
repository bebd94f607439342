"""
洞察文档数据仓库
只读访问 insights 表：按 ID 查询、按 subreddit 查询最新文档
"""

import logging
from typing import Optional

from insight_dashboard.config import get_settings
from insight_dashboard.insights.models import InsightDocument

from .supabase_client import get_supabase_client, is_supabase_configured


# 最新文档的排序规则：created_at 降序，再按 id 降序保证结果确定
_LATEST_ORDER = (("created_at", True), ("id", True))


def escape_like_pattern(value: str) -> str:
    """转义 LIKE / ILIKE 通配符，使其按字面匹配"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class InsightRepository:
    """洞察文档数据仓库"""

    def __init__(self, client=None, table: Optional[str] = None):
        self._client = client
        self.table = table or get_settings().insights_table

    @property
    def client(self):
        """获取 Supabase 客户端"""
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def is_available(self) -> bool:
        """检查数据库是否可用"""
        if self._client is not None:
            return True
        return is_supabase_configured() and self.client is not None

    # ==================== 查询方法 ====================

    def get_by_id(self, document_id: str) -> Optional[InsightDocument]:
        """
        按 ID 查询文档

        Returns:
            InsightDocument，不存在时返回 None
        """
        result = self.client.table(self.table) \
            .select("*") \
            .eq("id", document_id) \
            .limit(1) \
            .execute()

        if not result.data:
            return None
        return InsightDocument.from_row(result.data[0])

    def find_latest_for_subreddit(self, subreddit: str) -> Optional[InsightDocument]:
        """
        查询某个 subreddit 最新的文档

        先精确匹配；没有结果时再做不区分大小写的匹配（如 UberDrivers → uberdrivers）。

        Returns:
            InsightDocument，不存在时返回 None
        """
        if not subreddit:
            return None

        row = self._latest(self.client.table(self.table).select("*").eq("subreddit", subreddit))
        if row is None:
            logging.debug(f"subreddit={subreddit} 无精确匹配，尝试忽略大小写")
            row = self._latest(
                self.client.table(self.table).select("*").ilike("subreddit", escape_like_pattern(subreddit))
            )

        return InsightDocument.from_row(row) if row is not None else None

    @staticmethod
    def _latest(query):
        for column, desc in _LATEST_ORDER:
            query = query.order(column, desc=desc)
        result = query.limit(1).execute()
        return result.data[0] if result.data else None
