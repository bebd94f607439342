"""
聊天助手 API 路由
把前端的对话消息转发给托管的 LLM，返回助手回复
"""

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Request

from insight_dashboard.api.response import ErrorCode, error_response, new_request_id
from insight_dashboard.llm import get_chat_provider, validate_messages

router = APIRouter(prefix="/api/chat", tags=["聊天助手"])


@router.post("")
async def chat(request: Request):
    """
    对话补全

    请求体：{"messages": [{"role": "system|user|assistant", "content": "..."}]}

    返回：
    - 200 {"reply": "..."}
    - 400 请求体不是合法 JSON 或 messages 不合法
    - 502 模型返回空内容
    - 500 模型服务不可用或凭据未配置
    """
    request_id = new_request_id()
    start_time = datetime.now()

    try:
        payload = await request.json()
    except ValueError:
        logging.warning(f"⚠️ [{request_id}] 聊天请求体不是合法 JSON")
        return error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message="Invalid JSON payload.",
            status_code=400,
            request_id=request_id
        )

    messages = payload.get("messages") if isinstance(payload, dict) else None
    invalid = validate_messages(messages)
    if invalid:
        logging.warning(f"⚠️ [{request_id}] 聊天消息不合法: {invalid}")
        return error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message=invalid,
            status_code=400,
            request_id=request_id
        )

    logging.info(f"💬 [{request_id}] 收到聊天请求: {len(messages)} 条消息")

    try:
        provider = get_chat_provider()
        loop = asyncio.get_event_loop()
        reply = await loop.run_in_executor(None, provider.chat, messages)
    except Exception as e:
        logging.error(f"❌ [{request_id}] 聊天请求失败: {e}")
        return error_response(
            code=ErrorCode.UPSTREAM_ERROR,
            message="Failed to reach the chat model. Please try again later.",
            status_code=500,
            request_id=request_id
        )

    if not reply:
        logging.error(f"❌ [{request_id}] 模型返回空内容")
        return error_response(
            code=ErrorCode.EMPTY_UPSTREAM_RESPONSE,
            message="No response content returned from the chat model.",
            status_code=502,
            request_id=request_id
        )

    duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
    logging.info(f"✅ [{request_id}] 聊天完成: 回复{len(reply)}字符, 耗时{duration_ms}ms")
    return {"reply": reply}
