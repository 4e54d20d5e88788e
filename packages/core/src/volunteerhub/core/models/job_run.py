"""JobRunSummary -- 调度任务单次运行摘要

每个条目的处理结果显式记录为 ItemResult，汇总到运行摘要，
单个条目失败不会中断整批处理。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, computed_field

from .enums import ItemOutcome, JobName, RunStatus


class ItemResult(BaseModel):
    """单个条目（task 或 signup）的处理结果"""

    item_id: str = Field(description="task_id 或 signup_id")
    outcome: ItemOutcome = Field(description="处理结果")
    from_status: str | None = Field(default=None, description="处理前状态")
    to_status: str | None = Field(default=None, description="处理后状态")
    error_type: str | None = Field(default=None, description="失败时的异常类型")
    reason: str = Field(default="", description="失败或冲突原因")


class JobRunSummary(BaseModel):
    """调度任务单次运行摘要"""

    run_id: str = Field(description="运行标识，ULID 格式")
    job_name: JobName = Field(description="调度任务名称")
    target_date: date = Field(description="运行所针对的日期")
    started_at: datetime = Field(description="开始时间")
    finished_at: datetime | None = Field(default=None, description="结束时间")
    status: RunStatus = Field(default=RunStatus.SUCCEEDED, description="运行结果")
    error: str = Field(default="", description="整次运行失败原因")
    items: list[ItemResult] = Field(default_factory=list, description="条目处理结果")

    @computed_field
    @property
    def total(self) -> int:
        return len(self.items)

    @computed_field
    @property
    def succeeded(self) -> int:
        return self._count(ItemOutcome.UPDATED, ItemOutcome.SENT)

    @computed_field
    @property
    def failed(self) -> int:
        return self._count(ItemOutcome.FAILED)

    @computed_field
    @property
    def unchanged(self) -> int:
        return self._count(ItemOutcome.UNCHANGED)

    @computed_field
    @property
    def conflicts(self) -> int:
        return self._count(ItemOutcome.CONFLICT)

    def _count(self, *outcomes: ItemOutcome) -> int:
        return sum(1 for item in self.items if item.outcome in outcomes)

    def finish(self, finished_at: datetime) -> "JobRunSummary":
        """结束运行：根据条目结果确定最终状态"""
        self.finished_at = finished_at
        if self.status == RunStatus.SUCCEEDED and self.failed > 0:
            self.status = RunStatus.PARTIAL
        return self
