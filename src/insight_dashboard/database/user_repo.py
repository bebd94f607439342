"""
用户数据仓库
users 表的简单读写
"""

import logging
from typing import Any, Dict, List, Optional

from insight_dashboard.config import get_settings

from .supabase_client import get_supabase_client, is_supabase_configured


class UserRepository:
    """用户数据仓库"""

    def __init__(self, client=None, table: Optional[str] = None):
        self._client = client
        self.table = table or get_settings().users_table

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def is_available(self) -> bool:
        if self._client is not None:
            return True
        return is_supabase_configured() and self.client is not None

    def list_users(self) -> List[Dict[str, Any]]:
        """获取全部用户"""
        result = self.client.table(self.table) \
            .select("*") \
            .order("created_at", desc=False) \
            .execute()
        return result.data or []

    def create_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        创建用户

        Args:
            user: 已校验的用户数据（name, email, created_at）

        Returns:
            数据库返回的新记录
        """
        result = self.client.table(self.table).insert(user).execute()
        if not result.data:
            raise RuntimeError("用户写入后未返回记录")

        logging.info(f"✅ 已创建用户: {user.get('email')}")
        return result.data[0]
