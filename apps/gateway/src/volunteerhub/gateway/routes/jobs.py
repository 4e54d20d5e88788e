"""调度任务路由

POST /api/jobs/{job_name}/run: 手动触发一次运行，可指定 date=YYYY-MM-DD。
GET /api/jobs/runs: 最近的运行摘要，支持 job_name 筛选。
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from starlette.responses import JSONResponse
from volunteerhub.core.config import JOB_RUNS_LIST_LIMIT
from volunteerhub.core.models import JobRunSummary, RunStatus

from ..deps import get_job_runner, get_store_group
from ..services.job_runner import UnknownJobError

router = APIRouter()


class JobRunListResponse(BaseModel):
    """运行摘要列表响应"""

    runs: list[JobRunSummary]


def _today(request: Request) -> date:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is not None:
        return scheduler.today()
    return date.today()


@router.get("/api/jobs/runs", response_model=JobRunListResponse)
async def list_job_runs(
    job_name: str | None = Query(default=None, description="按 job 名称筛选"),
    limit: int = Query(default=JOB_RUNS_LIST_LIMIT, ge=1, le=500, description="返回条数"),
    store_group=Depends(get_store_group),
):
    """查询最近的运行摘要，按开始时间倒序"""
    runs = await store_group.job_run_store.list_runs(job_name=job_name, limit=limit)
    return JobRunListResponse(runs=runs)


@router.post("/api/jobs/{job_name}/run")
async def run_job(
    job_name: str,
    request: Request,
    run_date: date | None = Query(
        default=None,
        alias="date",
        description="视为“今天”的日期，默认按调度时区的当前日期",
    ),
    runner=Depends(get_job_runner),
):
    """手动触发一次 job 运行，返回运行摘要"""
    try:
        runner.get_job(job_name)
    except UnknownJobError:
        return JSONResponse(
            status_code=404,
            content={
                "error": {
                    "code": "JOB_NOT_FOUND",
                    "message": f"Job {job_name} does not exist",
                }
            },
        )

    summary = await runner.run(job_name, run_date or _today(request))
    request.state.run_id = summary.run_id

    if summary.status == RunStatus.SKIPPED:
        return JSONResponse(
            status_code=409,
            content={
                "error": {
                    "code": "JOB_ALREADY_RUNNING",
                    "message": summary.error,
                },
                "run": summary.model_dump(mode="json"),
            },
        )

    return summary.model_dump(mode="json")
