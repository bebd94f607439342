"""
Reddit 洞察仪表盘后端
读取已入库的 subreddit 洞察文档，规范化后提供给前端图表和列表
"""

__version__ = "1.0.0"
