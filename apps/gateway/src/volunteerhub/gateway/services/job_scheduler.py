"""DailyJobScheduler -- 每日定时触发调度任务

基于 APScheduler AsyncIOScheduler，每个启用的 job 注册一个 CronTrigger
（HH:MM，按配置时区，夏令时切换由 trigger 处理）。触发时以配置时区的当天日期
调用 JobRunner.run()。stop() 关闭调度器后等待正在执行的运行完成。
"""

import asyncio
from collections.abc import Callable
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from volunteerhub.core.models import JobName

from ..config import SchedulerConfig
from .job_runner import JobRunner

log = structlog.get_logger()

# 进程暂停或事件循环阻塞导致错过触发时，一小时内仍补跑一次
_MISFIRE_GRACE_S = 3600


class DailyJobScheduler:
    """每日调度器"""

    def __init__(
        self,
        runner: JobRunner,
        config: SchedulerConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            runner: JobRunner 实例
            config: 调度配置
            clock: 返回当前时间的函数（测试注入），默认按配置时区取当前时间
        """
        self._runner = runner
        self._config = config
        self._tz: ZoneInfo = config.tzinfo
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._scheduler: AsyncIOScheduler | None = None
        self._running: set[asyncio.Task] = set()

    def schedule_plan(self) -> dict[JobName, time]:
        """启用的 job 及其每日运行时间"""
        plan: dict[JobName, time] = {}
        if self._config.status_job_enabled:
            plan[JobName.TASK_STATUS_ADVANCE] = self._config.status_job_time
        if self._config.reminder_job_enabled:
            plan[JobName.REMINDER_DISPATCH] = self._config.reminder_job_time
        return plan

    def build_trigger(self, at: time) -> CronTrigger:
        """每日 at 时刻（配置时区）触发的 CronTrigger"""
        return CronTrigger(hour=at.hour, minute=at.minute, timezone=self._tz)

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def today(self) -> date:
        """按配置时区计算的当前日期"""
        return self._clock().astimezone(self._tz).date()

    def next_run_times(self) -> dict[JobName, datetime | None]:
        """已注册 job 的下一次触发时间"""
        if self._scheduler is None:
            return {}
        return {JobName(job.id): job.next_run_time for job in self._scheduler.get_jobs()}

    def start(self) -> None:
        """为每个启用且已注册的 job 注册 cron 触发并启动调度器

        必须在事件循环内调用。
        """
        if self.is_running:
            return

        if not self._config.reminder_job_enabled:
            log.warning(
                "reminder_job_disabled",
                message="提醒任务未启用，设置 VOLUNTEERHUB_REMINDER_JOB_ENABLED=true 开启",
            )

        self._scheduler = AsyncIOScheduler(timezone=self._tz)
        for job_name, at in self.schedule_plan().items():
            if job_name not in self._runner.job_names:
                log.warning("scheduled_job_not_registered", job_name=job_name.value)
                continue
            self._scheduler.add_job(
                self.fire,
                trigger=self.build_trigger(at),
                args=[job_name],
                id=job_name.value,
                name=job_name.value,
                replace_existing=True,
                coalesce=True,
                max_instances=1,
                misfire_grace_time=_MISFIRE_GRACE_S,
            )

        self._scheduler.start()
        for job_name, next_run in self.next_run_times().items():
            log.info(
                "job_scheduled",
                job_name=job_name.value,
                at=self.schedule_plan()[job_name].isoformat(timespec="minutes"),
                timezone=self._config.timezone,
                next_run_time=next_run.isoformat() if next_run else None,
            )

    async def stop(self) -> None:
        """停止调度：不再触发新的运行，等待正在执行的运行结束"""
        if self.is_running:
            self._scheduler.shutdown(wait=False)

        running = [t for t in self._running if not t.done()]
        if running:
            await asyncio.gather(*running, return_exceptions=True)
        self._running.clear()
        log.info("scheduler_stopped")

    async def fire(self, job_name: JobName) -> None:
        """cron 触发入口：以当天日期执行一次 job"""
        # 运行包装为独立 task，调度器关闭时取消触发协程不会中断正在执行的运行
        run_task = asyncio.create_task(self._runner.run(job_name, self.today()))
        self._running.add(run_task)
        run_task.add_done_callback(self._running.discard)
        try:
            await asyncio.shield(run_task)
        except Exception:
            log.exception("scheduled_job_crashed", job_name=job_name.value)
