"""StatusAdvancer -- 每日推进任务生命周期状态

流程：
1. 读取全部任务（读取失败只终止本次运行）
2. 每个任务独立调用 Task.advance(today)
3. 状态变化的任务逐个 compare-and-set 持久化
4. 单个任务写入失败记录日志并跳过，其余任务继续
"""

from datetime import UTC, date, datetime

import structlog
from ulid import ULID
from volunteerhub.core.exceptions import PersistenceError
from volunteerhub.core.models import (
    ItemOutcome,
    ItemResult,
    JobName,
    JobRunSummary,
    RunStatus,
    Task,
)
from volunteerhub.core.store.protocols import TaskStore

log = structlog.get_logger()


class StatusAdvancer:
    """任务状态推进器"""

    job_name = JobName.TASK_STATUS_ADVANCE

    def __init__(self, task_store: TaskStore) -> None:
        self._task_store = task_store

    async def run(self, today: date, run_id: str | None = None) -> JobRunSummary:
        """调度入口：按 today 推进全部任务"""
        return await self.advance_all_task_statuses(today, run_id=run_id)

    async def advance_all_task_statuses(
        self,
        today: date,
        run_id: str | None = None,
    ) -> JobRunSummary:
        """推进全部任务的生命周期状态

        Args:
            today: 当前日期（注入，便于测试）
            run_id: 运行标识，None 时自动生成

        Returns:
            JobRunSummary -- 不向调用方抛出条目级或读取级异常
        """
        summary = JobRunSummary(
            run_id=run_id or str(ULID()),
            job_name=self.job_name,
            target_date=today,
            started_at=datetime.now(UTC),
        )

        try:
            tasks = await self._task_store.list_all_tasks()
        except PersistenceError as e:
            log.error(
                "job_candidates_read_failed",
                job_name=self.job_name.value,
                operation=e.operation,
                error_type=type(e.original_error).__name__,
            )
            summary.status = RunStatus.FAILED
            summary.error = str(e)
            return summary.finish(datetime.now(UTC))

        for task in tasks:
            summary.items.append(await self._advance_one(task, today))

        log.info(
            "task_status_advance_completed",
            target_date=today.isoformat(),
            total=summary.total,
            updated=summary.succeeded,
            failed=summary.failed,
            conflicts=summary.conflicts,
        )
        return summary.finish(datetime.now(UTC))

    async def _advance_one(self, task: Task, today: date) -> ItemResult:
        """推进单个任务，失败只影响该任务"""
        previous = task.status
        try:
            new_status = task.advance(today)
        except Exception as e:
            log.exception("task_status_evaluate_failed", task_id=task.task_id)
            return ItemResult(
                item_id=task.task_id,
                outcome=ItemOutcome.FAILED,
                from_status=str(previous),
                error_type=type(e).__name__,
                reason=str(e),
            )

        if new_status is None:
            return ItemResult(
                item_id=task.task_id,
                outcome=ItemOutcome.UNCHANGED,
                from_status=str(previous),
                to_status=str(previous),
            )

        try:
            saved = await self._task_store.save_task_status(task, expected_status=previous)
        except PersistenceError as e:
            log.error(
                "task_status_save_failed",
                task_id=task.task_id,
                from_status=str(previous),
                to_status=new_status.value,
                error_type=type(e.original_error).__name__,
            )
            return ItemResult(
                item_id=task.task_id,
                outcome=ItemOutcome.FAILED,
                from_status=str(previous),
                to_status=new_status.value,
                error_type=type(e).__name__,
                reason=str(e),
            )
        except Exception as e:
            log.exception("task_status_save_failed", task_id=task.task_id)
            return ItemResult(
                item_id=task.task_id,
                outcome=ItemOutcome.FAILED,
                from_status=str(previous),
                to_status=new_status.value,
                error_type=type(e).__name__,
                reason=str(e),
            )

        if not saved:
            log.warning(
                "task_status_conflict",
                task_id=task.task_id,
                expected_status=str(previous),
                to_status=new_status.value,
            )
            return ItemResult(
                item_id=task.task_id,
                outcome=ItemOutcome.CONFLICT,
                from_status=str(previous),
                to_status=new_status.value,
                reason="状态已被其他调用修改",
            )

        log.info(
            "task_status_advanced",
            task_id=task.task_id,
            from_status=str(previous),
            to_status=new_status.value,
        )
        return ItemResult(
            item_id=task.task_id,
            outcome=ItemOutcome.UPDATED,
            from_status=str(previous),
            to_status=new_status.value,
        )
