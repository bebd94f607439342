"""
数据库模块
提供 Supabase PostgreSQL 连接和数据访问
"""

from .supabase_client import get_supabase_client, is_supabase_configured
from .insight_repo import InsightRepository
from .user_repo import UserRepository

__all__ = ["get_supabase_client", "is_supabase_configured", "InsightRepository", "UserRepository"]
