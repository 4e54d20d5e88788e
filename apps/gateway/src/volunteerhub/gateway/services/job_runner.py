"""JobRunner -- 调度任务单次运行的隔离单元

每次运行：
1. 生成 run_id 并绑定到 structlog contextvars
2. 进程内 asyncio.Lock + SQLite 租约锁，防止同一 job 重叠运行
3. 执行 job.run(today)，读取最新数据
4. job 抛出非预期异常时记录 FAILED 摘要，不向调用方抛出
5. 记录运行摘要（记录失败只写日志）
6. finally 释放租约
"""

import asyncio
from datetime import UTC, date, datetime
from typing import Protocol

import structlog
from ulid import ULID
from volunteerhub.core.exceptions import PersistenceError
from volunteerhub.core.models import JobName, JobRunSummary, RunStatus
from volunteerhub.core.store.protocols import JobLockStore, JobRunStore

log = structlog.get_logger()


class Job(Protocol):
    """可调度任务接口"""

    job_name: JobName

    async def run(self, today: date, run_id: str | None = None) -> JobRunSummary:
        """执行一次，返回运行摘要"""
        ...


class UnknownJobError(KeyError):
    """未注册的 job 名称"""


class JobRunner:
    """调度任务执行器"""

    def __init__(
        self,
        jobs: list[Job],
        run_store: JobRunStore,
        lock_store: JobLockStore,
        lock_ttl_s: float = 3600,
    ) -> None:
        self._jobs: dict[JobName, Job] = {job.job_name: job for job in jobs}
        self._run_store = run_store
        self._lock_store = lock_store
        self._lock_ttl_s = lock_ttl_s
        self._locks: dict[JobName, asyncio.Lock] = {name: asyncio.Lock() for name in self._jobs}

    @property
    def job_names(self) -> list[JobName]:
        return list(self._jobs)

    def get_job(self, job_name: JobName | str) -> Job:
        """根据名称获取 job

        Raises:
            UnknownJobError: job 未注册
        """
        try:
            return self._jobs[JobName(job_name)]
        except (KeyError, ValueError) as e:
            raise UnknownJobError(job_name) from e

    async def run(self, job_name: JobName | str, today: date) -> JobRunSummary:
        """执行一次指定 job

        Args:
            job_name: job 名称
            today: 当前日期（由调度器或手动触发方提供）

        Returns:
            JobRunSummary；锁被占用时返回 status=SKIPPED 的摘要，
            job 崩溃或租约读写失败时返回 status=FAILED 的摘要

        Raises:
            UnknownJobError: job 未注册
        """
        job = self.get_job(job_name)
        name = job.job_name
        run_id = str(ULID())

        with structlog.contextvars.bound_contextvars(run_id=run_id, job_name=name.value):
            lock = self._locks[name]
            if lock.locked():
                return await self._skipped(name, run_id, today, "同一进程内已有运行")

            async with lock:
                try:
                    acquired = await self._lock_store.acquire(name.value, run_id, self._lock_ttl_s)
                except PersistenceError as e:
                    log.error("job_lock_acquire_failed", error_type=type(e.original_error).__name__)
                    return await self._failed(name, run_id, today, str(e))

                if not acquired:
                    return await self._skipped(name, run_id, today, "运行锁被其他调用持有")

                started_at = datetime.now(UTC)
                try:
                    log.info("job_run_started", today=today.isoformat())
                    summary = await job.run(today, run_id=run_id)
                except Exception as e:
                    log.exception("job_run_crashed", error_type=type(e).__name__)
                    return await self._failed(
                        name, run_id, today, f"{type(e).__name__}: {e}", started_at
                    )
                finally:
                    try:
                        await self._lock_store.release(name.value, run_id)
                    except PersistenceError:
                        # 租约到期后会被自动接管
                        log.warning("job_lock_release_failed")

            await self._record(summary)
            log.info(
                "job_run_completed",
                status=summary.status.value,
                target_date=summary.target_date.isoformat(),
                total=summary.total,
                succeeded=summary.succeeded,
                failed=summary.failed,
            )
            return summary

    async def _skipped(
        self,
        name: JobName,
        run_id: str,
        today: date,
        reason: str,
    ) -> JobRunSummary:
        log.warning("job_run_skipped_locked", reason=reason)
        now = datetime.now(UTC)
        summary = JobRunSummary(
            run_id=run_id,
            job_name=name,
            target_date=today,
            started_at=now,
            status=RunStatus.SKIPPED,
            error=reason,
        ).finish(now)
        await self._record(summary)
        return summary

    async def _failed(
        self,
        name: JobName,
        run_id: str,
        today: date,
        error: str,
        started_at: datetime | None = None,
    ) -> JobRunSummary:
        now = datetime.now(UTC)
        summary = JobRunSummary(
            run_id=run_id,
            job_name=name,
            target_date=today,
            started_at=started_at or now,
            status=RunStatus.FAILED,
            error=error,
        ).finish(now)
        await self._record(summary)
        return summary

    async def _record(self, summary: JobRunSummary) -> None:
        """记录运行摘要，失败只写日志"""
        try:
            await self._run_store.record_run(summary)
        except PersistenceError as e:
            log.error(
                "job_run_record_failed",
                run_id=summary.run_id,
                error_type=type(e.original_error).__name__,
            )
