"""CLI 入口模块 -- python -m volunteerhub.gateway <command>

支持的命令：
  run-job <job_name> [YYYY-MM-DD]  立即执行一次指定 job，输出运行摘要 JSON
  list-runs [job_name]             列出最近的运行摘要
"""

import asyncio
import json
import sys
from datetime import date, datetime

from volunteerhub.core.config import JOB_RUNS_LIST_LIMIT, get_db_path
from volunteerhub.core.models import RunStatus
from volunteerhub.core.store import create_store_group
from volunteerhub.notify import create_sender, load_notify_config

from .config import load_scheduler_config
from .middleware.logging_config import setup_logging
from .services.job_runner import UnknownJobError
from .services.wiring import build_job_runner

USAGE = """用法: python -m volunteerhub.gateway <command>
命令:
  run-job <job_name> [YYYY-MM-DD]  立即执行一次指定 job
  list-runs [job_name]             列出最近的运行摘要"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]

    if command == "run-job":
        if len(sys.argv) < 3:
            print(USAGE)
            sys.exit(1)
        try:
            today = date.fromisoformat(sys.argv[3]) if len(sys.argv) > 3 else None
        except ValueError:
            print(f"非法日期: {sys.argv[3]}，应为 YYYY-MM-DD")
            sys.exit(1)
        sys.exit(asyncio.run(run_job(sys.argv[2], today)))
    elif command == "list-runs":
        job_name = sys.argv[2] if len(sys.argv) > 2 else None
        asyncio.run(list_runs(job_name))
    else:
        print(f"未知命令: {command}")
        print("可用命令: run-job, list-runs")
        sys.exit(1)


async def run_job(job_name: str, today: date | None) -> int:
    """执行一次 job，返回进程退出码（FAILED / SKIPPED 为非零）"""
    scheduler_config = load_scheduler_config()
    store_group = await create_store_group(get_db_path())
    sender = create_sender(load_notify_config())

    try:
        runner = build_job_runner(store_group, sender, scheduler_config.job_lock_ttl_s)
        effective_today = today or datetime.now(scheduler_config.tzinfo).date()
        try:
            summary = await runner.run(job_name, effective_today)
        except UnknownJobError:
            print(f"未知 job: {job_name}")
            print("可用 job: " + ", ".join(name.value for name in runner.job_names))
            return 1
        print(json.dumps(summary.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0 if summary.status in (RunStatus.SUCCEEDED, RunStatus.PARTIAL) else 2
    finally:
        await sender.aclose()
        await store_group.conn.close()


async def list_runs(job_name: str | None) -> None:
    """输出最近的运行摘要"""
    store_group = await create_store_group(get_db_path())
    try:
        runs = await store_group.job_run_store.list_runs(
            job_name=job_name, limit=JOB_RUNS_LIST_LIMIT
        )
        for run in runs:
            print(
                f"{run.run_id}  {run.job_name.value:<20} {run.target_date.isoformat()}  "
                f"{run.status.value:<9} total={run.total} ok={run.succeeded} failed={run.failed}"
            )
        if not runs:
            print("暂无运行记录")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
