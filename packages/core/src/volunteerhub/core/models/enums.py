"""枚举定义

包含 TaskStatus 生命周期状态机、ReminderStatus、调度任务相关枚举，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 生命周期状态机

    单调推进：AVAILABLE -> APPLICATION_ENDED -> ENDED，
    活动日期已过时允许 AVAILABLE 直接跳到 ENDED。
    任务还可能处于本枚举之外的领域状态（由 CRUD 层写入），
    这类状态只会被活动日期规则推进到 ENDED。
    """

    AVAILABLE = "AVAILABLE"
    APPLICATION_ENDED = "APPLICATION_ENDED"

    # 终态
    ENDED = "ENDED"


# 合法状态流转
VALID_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.AVAILABLE: {TaskStatus.APPLICATION_ENDED, TaskStatus.ENDED},
    TaskStatus.APPLICATION_ENDED: {TaskStatus.ENDED},
    # 终态不可再流转
    TaskStatus.ENDED: set(),
}

TERMINAL_STATES: set[TaskStatus] = {
    TaskStatus.ENDED,
}


class ReminderStatus(StrEnum):
    """Signup 提醒状态 -- PENDING 既是初始态也是投递失败后的重试落点"""

    PENDING = "PENDING"
    SENT = "SENT"


class JobName(StrEnum):
    """调度任务名称"""

    TASK_STATUS_ADVANCE = "task_status_advance"
    REMINDER_DISPATCH = "reminder_dispatch"


class RunStatus(StrEnum):
    """单次运行结果"""

    SUCCEEDED = "SUCCEEDED"
    # 部分条目失败，其余条目正常完成
    PARTIAL = "PARTIAL"
    # 候选集读取失败，本次运行未处理任何条目
    FAILED = "FAILED"
    # 运行锁被其他调用持有
    SKIPPED = "SKIPPED"


class ItemOutcome(StrEnum):
    """单个条目的处理结果"""

    UPDATED = "UPDATED"
    UNCHANGED = "UNCHANGED"
    SENT = "SENT"
    FAILED = "FAILED"
    CONFLICT = "CONFLICT"


def validate_transition(from_status: TaskStatus | str, to_status: TaskStatus) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态，可以是 TaskStatus 之外的领域状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    if from_status in VALID_TRANSITIONS:
        return to_status in VALID_TRANSITIONS[from_status]
    # 未知领域状态均视为非终态
    return to_status == TaskStatus.ENDED
