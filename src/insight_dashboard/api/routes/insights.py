"""
洞察数据 API 路由
- GET /api/insights          原始 / 过滤洞察（统一结构）
- GET /api/insights/summary  按时间范围过滤后的列表 + 话题汇总（词云 / 热力图）
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from insight_dashboard.api.response import ErrorCode, error_response, new_request_id
from insight_dashboard.config import get_settings
from insight_dashboard.database import InsightRepository
from insight_dashboard.insights import (
    InsightNotFoundError,
    InsightQueryService,
    aggregate_mentions,
    custom_window,
    filter_by_window,
    format_display_timeline,
    preset_window
)
from insight_dashboard.insights.range_filter import DEFAULT_TOP_N, PRESET_CUSTOM

router = APIRouter(prefix="/api/insights", tags=["洞察数据"])


def get_insight_repository() -> InsightRepository:
    """依赖注入：洞察数据仓库（测试中可覆盖）"""
    return InsightRepository()


async def _run_query(repo: InsightRepository, subreddit: str, requested_id: Optional[str], include_daily: bool):
    service = InsightQueryService(repo)
    # Supabase 客户端是同步的，放到线程池中执行
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, service.query, subreddit, requested_id, include_daily)


def _query_error(request_id: str, error: Exception, subreddit: str) -> JSONResponse:
    if isinstance(error, InsightNotFoundError):
        logging.warning(f"🔍 [{request_id}] {error.message}")
        return error_response(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message=error.message,
            status_code=404,
            request_id=request_id
        )

    logging.error(f"❌ [{request_id}] 加载洞察失败 (r/{subreddit}): {error}")
    return error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message="Failed to load insight data. Please try again later.",
        status_code=500,
        request_id=request_id
    )


def _database_unavailable(request_id: str) -> JSONResponse:
    logging.error(f"❌ [{request_id}] 数据库不可用")
    return error_response(
        code=ErrorCode.DATABASE_UNAVAILABLE,
        message="Failed to load insight data. Please try again later.",
        status_code=500,
        request_id=request_id
    )


@router.get("")
async def get_insights(
    subreddit: Optional[str] = Query(None, description="subreddit 名称（默认 uberdrivers）"),
    id: Optional[str] = Query(None, description="洞察文档 ID（UUID），不合法或过期时回退到最新文档"),
    ts: Optional[str] = Query(None, description="防缓存参数，不参与查询"),
    daily: bool = Query(False, description="是否附带按天分桶的 DailyMentions"),
    repo: InsightRepository = Depends(get_insight_repository)
):
    """
    获取某个 subreddit 的洞察数据

    返回：
    - **Subreddit**: 实际返回文档的 subreddit
    - **Raw_insights**: 原始洞察（含 HourlyMentions）
    - **Filtered_Insights**: 过滤洞察（含 FilterType / FilterCriteria）
    - **Resolved_Id**: 实际返回文档的 ID
    - **Fallback**: 未精确命中时的回退说明（reason / requestedId / requestedSubreddit）
    """
    request_id = new_request_id()
    start_time = datetime.now()
    subreddit = subreddit or get_settings().default_subreddit

    logging.info(f"📨 收到洞察请求 [{request_id}]: subreddit={subreddit}, id={id}, daily={daily}")

    if not repo.is_available():
        return _database_unavailable(request_id)

    try:
        result = await _run_query(repo, subreddit, id, daily)
    except Exception as e:
        return _query_error(request_id, e, subreddit)

    duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
    fallback = f", 回退原因={result.fallback.reason.value}" if result.fallback else ""
    logging.info(
        f"✅ [{request_id}] 请求完成: 文档={result.resolved_id}, "
        f"原始{len(result.raw_insights)}条, 过滤{len(result.filtered_insights)}条{fallback}, 耗时{duration_ms}ms"
    )

    return JSONResponse(content=jsonable_encoder(result.to_dict()))


@router.get("/summary")
async def get_insight_summary(
    subreddit: Optional[str] = Query(None, description="subreddit 名称（默认 uberdrivers）"),
    id: Optional[str] = Query(None, description="洞察文档 ID（UUID）"),
    view: str = Query("raw", pattern="^(raw|filtered)$", description="raw=原始洞察, filtered=过滤洞察"),
    range_: str = Query("1M", alias="range", description="1D/3D/7D/1M/3M/6M/1Y/ALL/CUSTOM"),
    start: Optional[str] = Query(None, description="自定义范围开始日期（range=CUSTOM）"),
    end: Optional[str] = Query(None, description="自定义范围结束日期（range=CUSTOM）"),
    limit: int = Query(DEFAULT_TOP_N, ge=1, le=100, description="话题汇总最多返回数量"),
    min_mentions: int = Query(0, ge=0, description="话题汇总的最小提及数"),
    repo: InsightRepository = Depends(get_insight_repository)
):
    """
    按时间范围过滤洞察并按话题汇总提及数

    - 时间线为 "Unknown date" 的洞察不会出现在任何范围内
    - 自定义范围的开始 / 结束无法解析或开始晚于结束时返回空结果
    """
    request_id = new_request_id()
    subreddit = subreddit or get_settings().default_subreddit

    logging.info(
        f"📊 [{request_id}] 洞察汇总: subreddit={subreddit}, view={view}, range={range_}, limit={limit}"
    )

    if range_.upper() == PRESET_CUSTOM:
        window = custom_window(start, end)
    else:
        try:
            window = preset_window(range_)
        except ValueError as e:
            return error_response(
                code=ErrorCode.VALIDATION_ERROR,
                message=str(e),
                status_code=400,
                request_id=request_id
            )

    if not repo.is_available():
        return _database_unavailable(request_id)

    try:
        result = await _run_query(repo, subreddit, id, False)
    except Exception as e:
        return _query_error(request_id, e, subreddit)

    mapped = result.raw_insights if view == "raw" else result.filtered_insights
    kept = filter_by_window([m.to_dict() for m in mapped], window)
    kept = sorted(kept, key=lambda item: item["Mentions"], reverse=True)

    body = {
        "Subreddit": result.subreddit,
        "Resolved_Id": result.resolved_id,
        "View": view,
        "Range": {"preset": range_.upper(), **(window.to_dict() if window else {"start": None, "end": None})},
        "Insights": [
            {
                "Topic": item["Topic"],
                "Mentions": item["Mentions"],
                "Timeline": item["Timeline"],
                "DisplayTimeline": format_display_timeline(item["Timeline"]),
            }
            for item in kept
        ],
        "TopTopics": aggregate_mentions(kept, limit=limit, min_mentions=min_mentions),
    }
    if result.fallback:
        body["Fallback"] = result.fallback.to_dict()

    logging.info(f"✅ [{request_id}] 汇总完成: 范围内{len(kept)}/{len(mapped)}条")
    return JSONResponse(content=jsonable_encoder(body))
