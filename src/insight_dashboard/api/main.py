import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from insight_dashboard import __version__
from insight_dashboard.config import get_settings
from .logging_config import setup_logging
from .response import success_response
from .routes import chat, insights, users

# 配置日志（按日期命名的文件 + 控制台）
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时打印关键配置；客户端在首次请求时才创建"""
    settings = get_settings()
    logging.info(
        f"🚀 Insight Dashboard API 启动: 默认 subreddit=r/{settings.default_subreddit}, "
        f"表={settings.insights_table}, LLM={settings.llm_provider}"
    )
    if not settings.supabase_configured:
        logging.warning("⚠️ Supabase 未配置，洞察和用户接口将返回 500")
    yield
    logging.info("⏹️ Insight Dashboard API 已停止")


app = FastAPI(
    title="Reddit Insight Dashboard API",
    description="Reddit 话题洞察数据接口 - 规范化后的洞察、时间范围汇总和聊天助手",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 配置 CORS（允许前端跨域访问）
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(insights.router)
app.include_router(chat.router)
app.include_router(users.router)


@app.get("/")
async def root():
    """API 根路径"""
    return success_response(
        data={
            "message": "Reddit Insight Dashboard API",
            "docs": "/docs",
            "endpoints": {
                "insights": "/api/insights?subreddit=uberdrivers",
                "summary": "/api/insights/summary?subreddit=uberdrivers&range=7D",
                "chat": "/api/chat",
                "users": "/api/users"
            }
        }
    )


@app.get("/health")
async def health_check():
    """健康检查端点"""
    return success_response(
        data={"status": "healthy"}
    )
