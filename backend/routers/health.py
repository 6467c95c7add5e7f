"""
健康检查路由
提供存活与就绪探针
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from core.config import get_settings
from core.database import engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["健康检查"])


class ComponentHealth(BaseModel):
    """组件健康状态"""
    status: str
    message: Optional[str] = None
    latency_ms: Optional[float] = None


# 系统启动时间
_start_time = datetime.now(timezone.utc)


async def check_database() -> ComponentHealth:
    """检查数据库连接"""
    start = time.time()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        latency = (time.time() - start) * 1000
        return ComponentHealth(
            status="healthy",
            message="数据库连接正常",
            latency_ms=round(latency, 2)
        )
    except Exception as e:
        logger.error(f"数据库健康检查失败: {e}")
        return ComponentHealth(
            status="unhealthy",
            message="数据库连接失败"
        )


@router.get("/health")
async def health():
    """存活检查：服务正在运行"""
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "message": "Server is running",
        "version": get_settings().app_version,
        "timestamp": now.isoformat(),
        "uptime_seconds": round((now - _start_time).total_seconds(), 2)
    }


@router.get("/health/live")
async def liveness_probe():
    """
    存活探针

    只检查应用是否在运行，不检查依赖组件
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe():
    """
    就绪探针

    检查数据库是否可用
    """
    db_health = await check_database()

    if db_health.status == "unhealthy":
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "database": db_health.model_dump()}
        )

    return {"status": "ready", "database": db_health.model_dump()}
