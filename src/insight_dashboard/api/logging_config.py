"""
API 日志配置
控制台彩色输出 + 按日期命名的日志文件，超过保留天数的旧文件自动删除
"""

import glob
import logging
import os
import sys
from datetime import datetime
from typing import Optional

from insight_dashboard.config import get_settings


LOG_FILE_PREFIX = "dashboard"


class PrettyFormatter(logging.Formatter):
    """
    控制台格式化器（带颜色）
    """
    COLORS = {
        "DEBUG": "\033[36m",     # 青色
        "INFO": "\033[32m",      # 绿色
        "WARNING": "\033[33m",   # 黄色
        "ERROR": "\033[31m",     # 红色
        "CRITICAL": "\033[35m",  # 紫色
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        message = f"{color}{timestamp} {record.levelname:7}{self.RESET} {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class FileFormatter(logging.Formatter):
    """
    文件格式化器

    输出示例：
    2026-01-23 11:00:00 | INFO    | root | 📨 收到洞察请求 [abc123]: subreddit=uberdrivers
    """
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        message = f"{timestamp} | {record.levelname:7} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def cleanup_old_logs(log_dir: str, prefix: str, backup_count: int) -> int:
    """
    清理超过保留天数的旧日志

    Returns:
        删除的文件数
    """
    pattern = os.path.join(log_dir, f"{prefix}_*.log")
    # 文件名带日期，倒序即从新到旧
    log_files = sorted(glob.glob(pattern), reverse=True)

    removed = 0
    for old_file in log_files[backup_count:]:
        try:
            os.remove(old_file)
            removed += 1
        except OSError as e:
            logging.warning(f"⚠️ 删除旧日志失败 {old_file}: {e}")
    return removed


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[str] = None,
    backup_count: Optional[int] = None,
    prefix: str = LOG_FILE_PREFIX
) -> None:
    """
    配置日志

    Args:
        level: 日志级别（默认取 LOG_LEVEL）
        log_dir: 日志目录（默认取 LOG_DIR，空字符串表示不写文件）
        backup_count: 保留的天数（默认取 LOG_BACKUP_COUNT）
        prefix: 日志文件名前缀

    日志文件命名：
        - logs/dashboard_2026-01-23.log  (今天)
        - logs/dashboard_2026-01-22.log  (昨天)
        - ...
    """
    settings = get_settings()
    level = level or settings.log_level
    log_dir = settings.log_dir if log_dir is None else log_dir
    backup_count = settings.log_backup_count if backup_count is None else backup_count

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # 移除现有处理器，避免重复输出
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(PrettyFormatter())
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        today = datetime.now().strftime("%Y-%m-%d")
        log_file = os.path.join(log_dir, f"{prefix}_{today}.log")

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(FileFormatter())
        root_logger.addHandler(file_handler)

        cleanup_old_logs(log_dir, prefix, backup_count)

    # 降低第三方库的日志级别
    for noisy in ("httpx", "httpcore", "hpack", "urllib3", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
