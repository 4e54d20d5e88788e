"""Core 异常体系

持久化失败统一包装为 PersistenceError，由调度任务按条目隔离处理。
"""


class VolunteerHubError(Exception):
    """Core 包基础异常"""


class PersistenceError(VolunteerHubError):
    """数据存储读写失败（连接关闭、锁超时、约束冲突等）

    调度任务中：单条写入失败只跳过该条目；候选集读取失败仅终止本次运行。
    """

    def __init__(self, operation: str, original_error: Exception) -> None:
        """
        Args:
            operation: 失败的存储操作名称，如 "list_all_tasks"
            original_error: 原始异常
        """
        super().__init__(f"存储操作失败: {operation} -- {original_error}")
        self.operation = operation
        self.original_error = original_error


class InvalidTransitionError(VolunteerHubError):
    """非法的 Task 状态流转"""

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"非法状态流转: {from_status} -> {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class ReminderAlreadySentError(VolunteerHubError):
    """提醒已发送，reminder_sent 标记只允许 False -> True 一次"""

    def __init__(self, signup_id: str) -> None:
        super().__init__(f"Signup {signup_id} 的提醒已发送")
        self.signup_id = signup_id
