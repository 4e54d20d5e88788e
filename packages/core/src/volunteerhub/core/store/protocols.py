"""Store Protocol 接口定义

定义 TaskStore、SignupStore、JobRunStore、JobLockStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
调度任务只依赖这些接口，测试中可以用内存实现替换。
"""

from datetime import date
from typing import Protocol

from ..models.enums import TaskStatus
from ..models.job_run import JobRunSummary
from ..models.signup import TaskSignup
from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口"""

    async def list_all_tasks(self) -> list[Task]:
        """查询全部任务，失败抛出 PersistenceError"""
        ...

    async def save_task_status(
        self,
        task: Task,
        expected_status: TaskStatus | str,
    ) -> bool:
        """持久化单个任务状态（compare-and-set），失败抛出 PersistenceError"""
        ...


class SignupStore(Protocol):
    """TaskSignup 存储接口"""

    async def find_signups_for_date_with_reminder_pending(
        self,
        event_date: date,
    ) -> list[TaskSignup]:
        """查询候选集，失败抛出 PersistenceError"""
        ...

    async def save_signup(self, signup: TaskSignup) -> bool:
        """write-through 持久化提醒标记，失败抛出 PersistenceError"""
        ...


class JobRunStore(Protocol):
    """运行记录存储接口"""

    async def record_run(self, summary: JobRunSummary) -> None:
        """写入运行摘要"""
        ...

    async def list_runs(
        self,
        job_name: str | None = None,
        limit: int = 20,
    ) -> list[JobRunSummary]:
        """查询最近的运行摘要"""
        ...


class JobLockStore(Protocol):
    """运行锁存储接口"""

    async def acquire(self, job_name: str, holder: str, ttl_s: float) -> bool:
        """尝试获取租约"""
        ...

    async def release(self, job_name: str, holder: str) -> None:
        """释放租约"""
        ...
