"""Volunteer / TaskSignup Domain Model

reminder_sent 只允许 False -> True 一次，且只由提醒调度在确认投递后修改。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..exceptions import ReminderAlreadySentError
from .enums import ReminderStatus
from .task import Task


class Volunteer(BaseModel):
    """志愿者信息（本子系统只读）"""

    volunteer_id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(description="姓名")
    email: str = Field(description="邮箱地址")


class TaskSignup(BaseModel):
    """志愿者对某个任务的报名记录"""

    signup_id: str = Field(description="唯一标识，ULID 格式")
    volunteer: Volunteer = Field(description="报名的志愿者")
    task: Task = Field(description="报名的任务")
    reminder_sent: bool = Field(default=False, description="提醒是否已成功投递")
    reminder_sent_at: datetime | None = Field(default=None, description="提醒投递时间")
    created_at: datetime = Field(description="报名时间")

    @property
    def reminder_status(self) -> ReminderStatus:
        return ReminderStatus.SENT if self.reminder_sent else ReminderStatus.PENDING

    def mark_reminder_sent(self, at: datetime) -> None:
        """PENDING -> SENT，仅在确认投递成功后调用"""
        if self.reminder_sent:
            raise ReminderAlreadySentError(self.signup_id)
        self.reminder_sent = True
        self.reminder_sent_at = at
