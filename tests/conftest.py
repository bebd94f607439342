"""
测试环境配置
在导入应用前清理会影响默认行为的环境变量，避免读取本地 .env 中的真实凭据
"""

import os

os.environ["LOG_DIR"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
for _name in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY", "SUPABASE_ANON_KEY",
              "DEFAULT_SUBREDDIT", "INSIGHTS_TABLE", "LLM_PROVIDER"):
    os.environ.pop(_name, None)
