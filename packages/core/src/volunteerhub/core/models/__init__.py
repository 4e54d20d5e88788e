"""VolunteerHub Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    ItemOutcome,
    JobName,
    ReminderStatus,
    RunStatus,
    TaskStatus,
    validate_transition,
)
from .job_run import ItemResult, JobRunSummary
from .signup import TaskSignup, Volunteer
from .task import Task

__all__ = [
    # 枚举
    "TaskStatus",
    "ReminderStatus",
    "JobName",
    "RunStatus",
    "ItemOutcome",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "validate_transition",
    # Task
    "Task",
    # Signup
    "Volunteer",
    "TaskSignup",
    # Job run
    "JobRunSummary",
    "ItemResult",
]
