"""
洞察规范化与聚合模块
日期解析 → 时间线解析 → 提及统计 → 映射 → 查询服务 → 范围过滤
"""

from .dates import to_datetime, format_day, format_hour, format_display_date

from .timeline import (
    UNKNOWN_DATE,
    Timeline,
    resolve_raw_timeline,
    resolve_filtered_timeline,
    parse_timeline_label,
    format_display_timeline
)

from .mentions import MentionBucket, count_mentions, bucket_mentions, hourly_mentions, daily_mentions

from .mapper import UNKNOWN_TOPIC, MappedInsight, map_raw_insight, map_filtered_insight

from .models import InsightDocument, Fallback, FallbackReason, InsightQueryResult

from .query_service import InsightQueryService, InsightNotFoundError, is_valid_document_id

from .range_filter import (
    DateWindow,
    preset_window,
    custom_window,
    filter_by_window,
    aggregate_mentions
)

__all__ = [
    # 日期
    'to_datetime', 'format_day', 'format_hour', 'format_display_date',
    # 时间线
    'UNKNOWN_DATE', 'Timeline', 'resolve_raw_timeline', 'resolve_filtered_timeline',
    'parse_timeline_label', 'format_display_timeline',
    # 提及统计
    'MentionBucket', 'count_mentions', 'bucket_mentions', 'hourly_mentions', 'daily_mentions',
    # 映射
    'UNKNOWN_TOPIC', 'MappedInsight', 'map_raw_insight', 'map_filtered_insight',
    # 模型
    'InsightDocument', 'Fallback', 'FallbackReason', 'InsightQueryResult',
    # 查询服务
    'InsightQueryService', 'InsightNotFoundError', 'is_valid_document_id',
    # 范围过滤
    'DateWindow', 'preset_window', 'custom_window', 'filter_by_window', 'aggregate_mentions'
]
