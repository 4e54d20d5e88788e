"""ReminderDispatcher -- 每日向次日活动的报名者发送一次提醒

流程：
1. 查询活动日期为 tomorrow 且 reminder_sent=False 的报名（候选集）
2. 每个候选独立处理：渲染邮件 -> 带超时投递 -> 成功后立即标记并提交
3. 投递失败记录日志，reminder_sent 保持 False，下次运行自动重试
4. 同一次运行内不重试

reminder 状态机：PENDING -> SENT，仅在确认投递后流转，不可回退。
"""

import asyncio
from datetime import UTC, date, datetime, timedelta

import structlog
from ulid import ULID
from volunteerhub.core.config import REMINDER_SEND_TIMEOUT_S
from volunteerhub.core.exceptions import PersistenceError
from volunteerhub.core.models import (
    ItemOutcome,
    ItemResult,
    JobName,
    JobRunSummary,
    ReminderStatus,
    RunStatus,
    TaskSignup,
)
from volunteerhub.core.store.protocols import SignupStore
from volunteerhub.notify import DeliveryError, NotificationSender

from .reminder_message import render_reminder

log = structlog.get_logger()


class ReminderDispatcher:
    """提醒调度器"""

    job_name = JobName.REMINDER_DISPATCH

    def __init__(
        self,
        signup_store: SignupStore,
        sender: NotificationSender,
        send_timeout_s: float = REMINDER_SEND_TIMEOUT_S,
    ) -> None:
        self._signup_store = signup_store
        self._sender = sender
        self._send_timeout_s = send_timeout_s

    async def run(self, today: date, run_id: str | None = None) -> JobRunSummary:
        """调度入口：为 today + 1 天的活动发送提醒"""
        return await self.dispatch_reminders_for(today + timedelta(days=1), run_id=run_id)

    async def dispatch_reminders_for(
        self,
        tomorrow: date,
        run_id: str | None = None,
    ) -> JobRunSummary:
        """为活动日期为 tomorrow 的候选报名发送提醒

        Args:
            tomorrow: 目标活动日期（注入，便于测试）
            run_id: 运行标识，None 时自动生成

        Returns:
            JobRunSummary -- 不向调用方抛出条目级或读取级异常
        """
        summary = JobRunSummary(
            run_id=run_id or str(ULID()),
            job_name=self.job_name,
            target_date=tomorrow,
            started_at=datetime.now(UTC),
        )

        try:
            candidates = await self._signup_store.find_signups_for_date_with_reminder_pending(
                tomorrow
            )
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

        log.info(
            "reminder_candidates_found",
            target_date=tomorrow.isoformat(),
            count=len(candidates),
        )

        for signup in candidates:
            summary.items.append(await self._dispatch_one(signup))

        log.info(
            "reminder_dispatch_completed",
            target_date=tomorrow.isoformat(),
            total=summary.total,
            sent=summary.succeeded,
            failed=summary.failed,
        )
        return summary.finish(datetime.now(UTC))

    async def _dispatch_one(self, signup: TaskSignup) -> ItemResult:
        """处理单个候选报名，失败只影响该报名"""
        recipient = signup.volunteer.email
        bound_log = log.bind(
            signup_id=signup.signup_id,
            task_id=signup.task.task_id,
            recipient=recipient,
        )
        pending = ReminderStatus.PENDING.value

        # 1. 渲染 + 投递
        try:
            subject, body = render_reminder(signup)
            async with asyncio.timeout(self._send_timeout_s):
                await self._sender.send(recipient, subject, body)
        except TimeoutError as e:
            bound_log.error("reminder_delivery_failed", reason="timeout")
            return self._failed(signup, DeliveryError(recipient, "投递超时", original_error=e))
        except DeliveryError as e:
            bound_log.error(
                "reminder_delivery_failed",
                reason=e.reason,
                recoverable=e.recoverable,
            )
            return self._failed(signup, e)
        except Exception as e:
            bound_log.exception("reminder_delivery_failed", reason="unexpected_error")
            return self._failed(signup, e)

        # 2. 投递成功：立即标记并提交（write-through）
        try:
            signup.mark_reminder_sent(datetime.now(UTC))
            saved = await self._signup_store.save_signup(signup)
        except Exception as e:
            # 投递已成功但标记未落盘，下次运行会重新选中该报名
            bound_log.error(
                "reminder_mark_failed",
                error_type=type(e).__name__,
            )
            return self._failed(signup, e)

        if not saved:
            bound_log.warning("reminder_already_marked")
        bound_log.info("reminder_sent")
        return ItemResult(
            item_id=signup.signup_id,
            outcome=ItemOutcome.SENT,
            from_status=pending,
            to_status=ReminderStatus.SENT.value,
        )

    @staticmethod
    def _failed(signup: TaskSignup, error: Exception) -> ItemResult:
        return ItemResult(
            item_id=signup.signup_id,
            outcome=ItemOutcome.FAILED,
            from_status=ReminderStatus.PENDING.value,
            to_status=ReminderStatus.PENDING.value,
            error_type=type(error).__name__,
            reason=str(error),
        )
