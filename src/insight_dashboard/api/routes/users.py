"""
用户 API 路由
简单的用户列表 / 创建
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError, field_validator

from insight_dashboard.api.response import ErrorCode, error_response, new_request_id, success_response
from insight_dashboard.database import UserRepository

router = APIRouter(prefix="/api/users", tags=["用户"])


class UserCreate(BaseModel):
    """创建用户请求体"""
    name: str = Field(..., min_length=1, max_length=60)
    email: str = Field(..., min_length=3)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please provide a name")
        return value

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Please provide a valid email")
        return value


def get_user_repository() -> UserRepository:
    """依赖注入：用户数据仓库（测试中可覆盖）"""
    return UserRepository()


@router.get("")
async def list_users(repo: UserRepository = Depends(get_user_repository)):
    """获取全部用户"""
    request_id = new_request_id()

    try:
        users = repo.list_users()
    except Exception as e:
        logging.error(f"❌ [{request_id}] 获取用户失败: {e}")
        return error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message="Failed to fetch users",
            status_code=400,
            request_id=request_id,
            envelope=True
        )

    return success_response(data=users, request_id=request_id)


@router.post("")
async def create_user(request: Request, repo: UserRepository = Depends(get_user_repository)):
    """
    创建用户

    请求体：{"name": "...", "email": "..."}，email 统一转为小写
    """
    request_id = new_request_id()

    try:
        body = UserCreate.model_validate(await request.json())
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        return error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message=messages,
            status_code=400,
            request_id=request_id,
            envelope=True
        )
    except ValueError:
        return error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message="Invalid JSON payload.",
            status_code=400,
            request_id=request_id,
            envelope=True
        )

    record = {
        "name": body.name,
        "email": body.email,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        user = repo.create_user(record)
    except Exception as e:
        logging.error(f"❌ [{request_id}] 创建用户失败: {e}")
        return error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message=str(e),
            status_code=400,
            request_id=request_id,
            envelope=True
        )

    return JSONResponse(status_code=201, content=success_response(data=user, request_id=request_id))
