"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 通知通道 + 调度器启停 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from volunteerhub.core.config import get_db_path
from volunteerhub.core.store import create_store_group
from volunteerhub.notify import create_sender, load_notify_config

from .config import load_scheduler_config
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import health, jobs
from .services.job_scheduler import DailyJobScheduler
from .services.wiring import build_job_runner

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB、通知通道和调度器，关闭时依次清理"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    notify_config = load_notify_config()
    sender = create_sender(notify_config)
    app.state.notify_config = notify_config
    app.state.sender = sender

    scheduler_config = load_scheduler_config()
    app.state.scheduler_config = scheduler_config

    runner = build_job_runner(store_group, sender, scheduler_config.job_lock_ttl_s)
    app.state.job_runner = runner

    scheduler = DailyJobScheduler(runner, scheduler_config)
    app.state.scheduler = scheduler
    if scheduler_config.scheduler_enabled:
        scheduler.start()
    else:
        log.warning("scheduler_disabled", message="调度循环未启动，仅支持手动触发")

    yield

    # 关闭顺序：先停调度（等待运行结束），再关通道，最后关连接
    await scheduler.stop()
    await sender.aclose()
    await store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="VolunteerHub Scheduler",
        version="0.1.0",
        description="志愿任务生命周期推进与活动提醒调度服务",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    setup_logging()

    app.include_router(jobs.router, tags=["jobs"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
