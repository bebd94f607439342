"""
应用配置模块
统一管理 Supabase、LLM 和日志相关配置（从环境变量 / .env 读取）
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

# 加载 .env 文件
load_dotenv()


# ================= 默认值 =================

DEFAULT_SUBREDDIT = "uberdrivers"
DEFAULT_INSIGHTS_TABLE = "insights"
DEFAULT_USERS_TABLE = "users"
DEFAULT_LLM_PROVIDER = "azure"


class Settings:
    """应用配置类"""

    def __init__(self,
                 supabase_url: Optional[str] = None,
                 supabase_key: Optional[str] = None,
                 insights_table: str = DEFAULT_INSIGHTS_TABLE,
                 users_table: str = DEFAULT_USERS_TABLE,
                 default_subreddit: str = DEFAULT_SUBREDDIT,
                 llm_provider: str = DEFAULT_LLM_PROVIDER,
                 log_level: str = "INFO",
                 log_dir: Optional[str] = "logs",
                 log_backup_count: int = 30):
        """
        初始化配置

        Args:
            supabase_url: Supabase 项目地址
            supabase_key: Supabase 密钥（service key 优先）
            insights_table: 洞察文档表名
            users_table: 用户表名
            default_subreddit: 未指定 subreddit 时的默认值
            llm_provider: 聊天使用的 LLM 提供商
            log_level: 日志级别
            log_dir: 日志目录（None 表示只输出到控制台）
            log_backup_count: 日志文件保留天数
        """
        self.supabase_url = supabase_url
        self.supabase_key = supabase_key
        self.insights_table = insights_table
        self.users_table = users_table
        self.default_subreddit = default_subreddit
        self.llm_provider = llm_provider
        self.log_level = log_level
        self.log_dir = log_dir
        self.log_backup_count = log_backup_count

    @property
    def supabase_configured(self) -> bool:
        """检查 Supabase 是否已配置"""
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls) -> 'Settings':
        """从环境变量创建配置"""
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            # 优先使用 service key（后端只读查询），否则使用 anon key
            supabase_key=os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
            insights_table=os.getenv("INSIGHTS_TABLE", DEFAULT_INSIGHTS_TABLE),
            users_table=os.getenv("USERS_TABLE", DEFAULT_USERS_TABLE),
            default_subreddit=os.getenv("DEFAULT_SUBREDDIT", DEFAULT_SUBREDDIT),
            llm_provider=os.getenv("LLM_PROVIDER", DEFAULT_LLM_PROVIDER),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs") or None,
            log_backup_count=int(os.getenv("LOG_BACKUP_COUNT", "30")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """获取全局配置（进程内单例）"""
    return Settings.from_env()
