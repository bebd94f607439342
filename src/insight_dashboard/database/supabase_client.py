"""
Supabase 客户端
进程内单例：首次使用时创建，之后所有请求复用（连接池由客户端自己管理）
"""

import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

from insight_dashboard.config import get_settings


def is_supabase_configured() -> bool:
    """检查 Supabase 是否已配置"""
    return get_settings().supabase_configured


@lru_cache(maxsize=1)
def get_supabase_client() -> Optional[Client]:
    """
    获取 Supabase 客户端（单例模式）

    Returns:
        Supabase Client 实例，如果未配置或创建失败则返回 None
    """
    settings = get_settings()
    if not settings.supabase_configured:
        logging.warning("⚠️ Supabase 未配置，数据库功能不可用")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        logging.info("✅ Supabase 客户端初始化成功")
        return client
    except Exception as e:
        logging.error(f"❌ Supabase 连接失败: {e}")
        return None
