"""Task Domain Model

Task 的生命周期状态只能通过 advance() 按日期规则推进，
调用方不应直接给 status 赋值。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from ..exceptions import InvalidTransitionError
from .enums import TaskStatus, validate_transition


class Task(BaseModel):
    """志愿任务数据模型"""

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    location: str = Field(default="", description="活动地点")
    event_date: date | None = Field(default=None, description="活动日期")
    application_deadline: date | None = Field(default=None, description="报名截止日期")
    status: TaskStatus | str = Field(
        default=TaskStatus.AVAILABLE,
        description="生命周期状态，CRUD 层的其他领域状态按原样保留",
    )
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @field_validator("status")
    @classmethod
    def _coerce_status(cls, value: TaskStatus | str) -> TaskStatus | str:
        try:
            return TaskStatus(value)
        except ValueError:
            return value

    def advance(self, today: date) -> TaskStatus | None:
        """按当前日期推进生命周期状态

        规则按顺序独立判定：
        1. 报名截止日期早于 today 且状态为 AVAILABLE -> APPLICATION_ENDED
        2. 活动日期早于 today 且状态不是 ENDED -> ENDED（不论规则 1 是否命中）

        日期缺失时对应规则不触发。未知领域状态不受规则 1 影响。

        Returns:
            状态发生变化时返回新状态，否则 None
        """
        original = self.status
        target = original

        if (
            self.application_deadline is not None
            and self.application_deadline < today
            and target == TaskStatus.AVAILABLE
        ):
            target = TaskStatus.APPLICATION_ENDED

        if (
            self.event_date is not None
            and self.event_date < today
            and target != TaskStatus.ENDED
        ):
            target = TaskStatus.ENDED

        if target == original:
            return None
        if not validate_transition(original, target):
            raise InvalidTransitionError(original, target)

        self.status = target
        return target
