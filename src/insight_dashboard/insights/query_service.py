"""
洞察查询服务
确定要返回哪份文档（按 id + subreddit，未命中时回退到该 subreddit 的最新文档），
并把文档中的原始 / 过滤洞察映射为统一结构

回退链：
1. id 格式不合法 → invalid-id，跳过按 id 查询
2. 按 id 查到但 subreddit 不一致 → 丢弃，subreddit-mismatch
3. 仍未确定文档 → 查询 subreddit 最新文档（精确 → 忽略大小写），
   请求了 id 记 not-found，未请求 id 记 missing-id
4. 仍然没有 → InsightNotFoundError

入库任务会不断产生新文档，前端保存的 id 很容易过期；只要该 subreddit 有任何数据，
前端都应该能展示内容，而不是直接报错。
"""

import logging
import uuid
from typing import Optional, Tuple

from .mapper import map_filtered_insight, map_insights, map_raw_insight
from .models import Fallback, FallbackReason, InsightDocument, InsightQueryResult


class InsightNotFoundError(LookupError):
    """所有回退路径都找不到文档"""

    def __init__(self, subreddit: str, requested_id: Optional[str] = None):
        self.subreddit = subreddit
        self.requested_id = requested_id
        if requested_id:
            message = f"No insight data found for id {requested_id} ({subreddit})."
        else:
            message = f"No insight data found for subreddit {subreddit}."
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.args[0]


def is_valid_document_id(value: Optional[str]) -> bool:
    """文档 id 是否为合法的 UUID"""
    if not value:
        return False
    try:
        uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return False
    return True


class InsightQueryService:
    """
    洞察查询服务

    只读：不修改任何存储数据，可被多个请求并发调用
    """

    def __init__(self, repository=None):
        """
        初始化查询服务

        Args:
            repository: InsightRepository 实例（None 则使用默认 Supabase 仓库）
        """
        if repository is None:
            from insight_dashboard.database import InsightRepository
            repository = InsightRepository()
        self.repository = repository

    def resolve_document(
        self,
        subreddit: str,
        requested_id: Optional[str] = None
    ) -> Tuple[InsightDocument, Optional[Fallback]]:
        """
        按回退链确定要返回的文档

        Args:
            subreddit: 请求的 subreddit
            requested_id: 请求的文档 id（可选）

        Returns:
            (文档, 回退说明)，精确命中时回退说明为 None

        Raises:
            InsightNotFoundError: 该 subreddit 没有任何文档
        """
        reason: Optional[FallbackReason] = None
        document: Optional[InsightDocument] = None
        valid_id = False

        if requested_id:
            valid_id = is_valid_document_id(requested_id)
            if not valid_id:
                logging.warning(f"⚠️ 非法的文档 id，回退到最新文档: {requested_id}")
                reason = FallbackReason.INVALID_ID
        else:
            reason = FallbackReason.MISSING_ID

        if valid_id:
            by_id = self.repository.get_by_id(requested_id)
            if by_id is not None:
                if by_id.subreddit != subreddit:
                    logging.warning(
                        f"⚠️ 文档 {requested_id} 属于 r/{by_id.subreddit}，与请求的 r/{subreddit} 不一致"
                    )
                    reason = FallbackReason.SUBREDDIT_MISMATCH
                else:
                    document = by_id

        if document is None:
            document = self.repository.find_latest_for_subreddit(subreddit)
            if document is None:
                raise InsightNotFoundError(subreddit, requested_id)
            if reason is None:
                reason = FallbackReason.NOT_FOUND

        fallback = None
        if reason is not None:
            fallback = Fallback(reason, requested_id=requested_id, requested_subreddit=subreddit)
        return document, fallback

    def query(
        self,
        subreddit: str,
        requested_id: Optional[str] = None,
        include_daily: bool = False
    ) -> InsightQueryResult:
        """
        查询并映射洞察文档

        Args:
            subreddit: 请求的 subreddit
            requested_id: 请求的文档 id（可选）
            include_daily: 是否附带按天分桶的直方图

        Returns:
            InsightQueryResult

        Raises:
            InsightNotFoundError: 该 subreddit 没有任何文档
        """
        document, fallback = self.resolve_document(subreddit, requested_id)

        return InsightQueryResult(
            subreddit=document.subreddit,
            resolved_id=document.id,
            raw_insights=map_insights(document.raw_insights, map_raw_insight, include_daily),
            filtered_insights=map_insights(document.filtered_insights, map_filtered_insight, include_daily),
            fallback=fallback,
        )
