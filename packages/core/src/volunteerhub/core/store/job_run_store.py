"""JobRunStore SQLite 实现 -- 调度任务运行记录"""

import json
from datetime import date, datetime

import aiosqlite

from ..models.enums import JobName, RunStatus
from ..models.job_run import ItemResult, JobRunSummary
from .transaction import read_guard, write_transaction

_RUN_COLUMNS = (
    "run_id, job_name, target_date, started_at, finished_at, status, error, items"
)


class SqliteJobRunStore:
    """JobRunStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def record_run(self, summary: JobRunSummary) -> None:
        """写入运行摘要（立即提交）"""
        items_json = json.dumps(
            [item.model_dump(mode="json") for item in summary.items],
            ensure_ascii=False,
        )
        async with write_transaction(self._conn, "record_run"):
            await self._conn.execute(
                f"""
                INSERT OR REPLACE INTO job_runs ({_RUN_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    summary.run_id,
                    summary.job_name.value,
                    summary.target_date.isoformat(),
                    summary.started_at.isoformat(),
                    summary.finished_at.isoformat() if summary.finished_at else None,
                    summary.status.value,
                    summary.error,
                    items_json,
                ),
            )

    async def get_run(self, run_id: str) -> JobRunSummary | None:
        """根据 run_id 查询运行摘要"""
        async with read_guard("get_run"):
            cursor = await self._conn.execute(
                f"SELECT {_RUN_COLUMNS} FROM job_runs WHERE run_id = ?",
                (run_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_summary(row)

    async def list_runs(
        self,
        job_name: str | None = None,
        limit: int = 20,
    ) -> list[JobRunSummary]:
        """查询最近的运行摘要，按 started_at 倒序"""
        async with read_guard("list_runs"):
            if job_name:
                cursor = await self._conn.execute(
                    f"""
                    SELECT {_RUN_COLUMNS} FROM job_runs
                    WHERE job_name = ?
                    ORDER BY started_at DESC LIMIT ?
                    """,
                    (job_name, limit),
                )
            else:
                cursor = await self._conn.execute(
                    f"SELECT {_RUN_COLUMNS} FROM job_runs ORDER BY started_at DESC LIMIT ?",
                    (limit,),
                )
            rows = await cursor.fetchall()
        return [self._row_to_summary(row) for row in rows]

    @staticmethod
    def _row_to_summary(row) -> JobRunSummary:
        """将数据库行转换为 JobRunSummary 模型"""
        items_data = json.loads(row[7]) if row[7] else []
        return JobRunSummary(
            run_id=row[0],
            job_name=JobName(row[1]),
            target_date=date.fromisoformat(row[2]),
            started_at=datetime.fromisoformat(row[3]),
            finished_at=datetime.fromisoformat(row[4]) if row[4] else None,
            status=RunStatus(row[5]),
            error=row[6] or "",
            items=[ItemResult(**item) for item in items_data],
        )
