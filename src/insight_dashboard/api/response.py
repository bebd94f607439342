"""
统一 API 响应格式

- 洞察 / 聊天端点的成功响应直接返回业务结构（前端按字段名读取）
- 用户 / 健康检查端点使用 success_response 信封
- 所有错误都通过 error_response 返回，带 HTTP 状态码
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi.responses import JSONResponse


def new_request_id() -> str:
    """生成 8 位请求 ID（用于日志关联）"""
    return str(uuid.uuid4())[:8]


def _meta(request_id: Optional[str], **extra_meta) -> dict:
    return {
        "request_id": request_id or new_request_id(),
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
        **extra_meta
    }


def success_response(
    data: Any = None,
    request_id: str = None,
    **extra_meta
) -> dict:
    """
    创建成功响应

    Args:
        data: 响应数据
        request_id: 请求ID（可选，自动生成）
        **extra_meta: 额外的元数据

    Returns:
        {"success": true, "data": ..., "error": null, "meta": {...}}
    """
    return {
        "success": True,
        "data": data,
        "error": None,
        "meta": _meta(request_id, **extra_meta)
    }


def error_response(
    code: str,
    message: str,
    status_code: int = 500,
    request_id: str = None,
    details: Any = None,
    envelope: bool = False,
    **extra_meta
) -> JSONResponse:
    """
    创建错误响应

    Args:
        code: 错误代码（如 "RESOURCE_NOT_FOUND"）
        message: 面向用户的错误信息
        status_code: HTTP 状态码
        request_id: 请求ID（可选，自动生成）
        details: 错误详情（可选）
        envelope: 是否使用 success_response 同样的信封结构（用户端点）
        **extra_meta: 额外的元数据

    Returns:
        JSONResponse，默认内容为 {"error": message, "code": code, "meta": {...}}

    常用错误代码：
        - VALIDATION_ERROR: 参数验证失败
        - DATABASE_UNAVAILABLE: 数据库不可用
        - RESOURCE_NOT_FOUND: 资源不存在
        - UPSTREAM_ERROR: 上游服务（LLM）请求失败
        - EMPTY_UPSTREAM_RESPONSE: 上游服务返回空内容
        - INTERNAL_ERROR: 内部错误
    """
    meta = _meta(request_id, **extra_meta)

    if envelope:
        error_info = {"code": code, "message": message}
        if details:
            error_info["details"] = details
        content = {"success": False, "data": None, "error": error_info, "meta": meta}
    else:
        content = {"error": message, "code": code, "meta": meta}
        if details:
            content["details"] = details

    return JSONResponse(status_code=status_code, content=content)


# 常用错误代码常量
class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DATABASE_UNAVAILABLE = "DATABASE_UNAVAILABLE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    EMPTY_UPSTREAM_RESPONSE = "EMPTY_UPSTREAM_RESPONSE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
