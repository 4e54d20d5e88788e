"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性、通知通道、调度器状态。
         profile=full 时真实探测邮件中继，否则 notification_sender="skipped"。
"""

import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="检查配置文件：core（默认）仅核心检查；full 包含邮件中继探测",
    ),
):
    """Readiness 检查 -- 验证核心依赖可用性

    检查项：
    1. sqlite: 数据库连通性
    2. notification_sender: 根据 profile 决定是否探测
    3. scheduler: running / disabled / stopped
    """
    effective_profile = profile or "core"

    checks = {}
    all_ok = True

    # 1. SQLite 连通性检查
    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except Exception as e:
        checks["sqlite"] = f"error: {str(e)}"
        all_ok = False

    # 2. 通知通道检查
    if effective_profile == "full":
        sender = getattr(request.app.state, "sender", None)
        if sender is None:
            checks["notification_sender"] = "skipped"
        else:
            try:
                if await sender.health_check():
                    checks["notification_sender"] = "ok"
                else:
                    checks["notification_sender"] = "unreachable"
                    all_ok = False
            except Exception as e:
                log.warning("health_check_error", error=str(e))
                checks["notification_sender"] = "unreachable"
                all_ok = False
    else:
        checks["notification_sender"] = "skipped"

    # 3. 调度器状态（关闭调度属于配置选择，不影响就绪）
    scheduler = getattr(request.app.state, "scheduler", None)
    scheduler_config = getattr(request.app.state, "scheduler_config", None)
    if scheduler_config is not None and not scheduler_config.scheduler_enabled:
        checks["scheduler"] = "disabled"
    elif scheduler is not None and scheduler.is_running:
        checks["scheduler"] = "running"
    else:
        checks["scheduler"] = "stopped"
        all_ok = False

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "profile": effective_profile,
            "checks": checks,
        },
    )
