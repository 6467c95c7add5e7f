"""
Blog App - 主入口
基于FastAPI的博客发布服务

- 用户注册 / 登录（JWT Bearer 令牌）
- 文章增删改查，修改和删除仅限作者本人
- 站点地图、健康检查
- 托管前端构建产物并提供 History 路由回退
"""

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, RedirectResponse

from core.config import get_settings
from core.database import init_db, close_db
from core.errors import ErrorCode, NotFoundException, register_exception_handlers
from core.events import event_bus, Events, Event
from core.event_handlers import register_event_handlers
from core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware, is_api_path
from core.static_files import CachedStaticFiles, resolve_index

settings = get_settings()

# 配置日志
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 减少第三方库的日志输出
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # ==================== 启动阶段 ====================
    logger.info(f"🚀 正在启动 {settings.app_name} v{settings.app_version}...")

    await init_db()
    register_event_handlers()

    await event_bus.publish(Event(name=Events.SYSTEM_STARTUP, source="kernel"))
    logger.info(f"🎉 {settings.app_name} 启动完成!")

    yield

    # ==================== 关闭阶段 ====================
    logger.info("🛑 系统关闭中...")
    await event_bus.publish(Event(name=Events.SYSTEM_SHUTDOWN, source="kernel"))
    await event_bus.drain()
    await close_db()
    logger.info("👋 系统已关闭")


# ==================== 创建应用 ====================
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="博客发布服务",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ==================== 中间件配置（顺序重要，后添加的先执行） ====================

# 1. CORS 跨域配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# 2. 安全响应头中间件
app.add_middleware(SecurityHeadersMiddleware)

# 3. 请求日志中间件
app.add_middleware(
    RequestLoggingMiddleware,
    slow_request_threshold=1.0  # 超过1秒的请求记录为慢请求
)


# ==================== 异常处理器 ====================
register_exception_handlers(app)


# ==================== 注册路由 ====================
from routers import auth, health, sitemap
from modules.blog.blog_router import router as blog_router

app.include_router(auth.router)
app.include_router(blog_router)
app.include_router(sitemap.router)
app.include_router(health.router)


# ==================== 静态文件配置 ====================
if settings.frontend_path:
    assets_path = os.path.join(settings.frontend_path, "assets")
    if os.path.isdir(assets_path):
        app.mount("/assets", CachedStaticFiles(directory=assets_path), name="assets")


# ==================== 前端 History 回退路由（必须放在所有业务路由之后） ====================
async def spa_history_fallback(full_path: str, request: Request):
    """
    - /auth、/blogs 下带尾部斜杠的路径 307 重定向到去掉斜杠的地址
    - /auth、/blogs 下其余未匹配的路径返回 404 JSON
    - 其他路径返回前端 index.html（未构建前端时同样返回 404）
    """
    path = request.url.path
    if is_api_path(path):
        if path.endswith("/") and path.rstrip("/"):
            return RedirectResponse(request.url.replace(path=path.rstrip("/")), status_code=307)
        raise NotFoundException("路由", code=ErrorCode.RESOURCE_NOT_FOUND)

    index_path = resolve_index(get_settings().frontend_path)
    if index_path:
        return FileResponse(index_path)
    raise NotFoundException("页面")


app.add_api_route(
    "/{full_path:path}",
    spa_history_fallback,
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False
)


# ==================== 启动入口 ====================
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        reload=settings.debug
    )
