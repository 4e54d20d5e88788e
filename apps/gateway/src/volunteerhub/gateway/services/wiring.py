"""调度组件装配 -- lifespan 与 CLI 共用"""

from volunteerhub.core.store import StoreGroup
from volunteerhub.notify import NotificationSender

from .job_runner import JobRunner
from .reminder_dispatcher import ReminderDispatcher
from .status_advancer import StatusAdvancer


def build_job_runner(
    store_group: StoreGroup,
    sender: NotificationSender,
    lock_ttl_s: float = 3600,
) -> JobRunner:
    """基于共享连接的 StoreGroup 组装 JobRunner（注册全部 job）"""
    return JobRunner(
        jobs=[
            StatusAdvancer(store_group.task_store),
            ReminderDispatcher(store_group.signup_store, sender),
        ],
        run_store=store_group.job_run_store,
        lock_store=store_group.job_lock_store,
        lock_ttl_s=lock_ttl_s,
    )
