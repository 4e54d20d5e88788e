"""Notify 异常体系

DeliveryError 覆盖传输失败、地址无效、对端拒收和超时。
"""


class NotifyError(Exception):
    """Notify 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可在下次运行时重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class DeliveryError(NotifyError):
    """通知投递失败

    调度任务捕获此异常后保留 reminder_sent=False，下次运行重新投递。
    """

    def __init__(
        self,
        recipient: str,
        reason: str,
        original_error: Exception | None = None,
        recoverable: bool = True,
    ) -> None:
        """
        Args:
            recipient: 收件地址
            reason: 失败原因
            original_error: 原始异常
            recoverable: 是否可重试
        """
        super().__init__(f"通知投递失败: {recipient} -- {reason}", recoverable=recoverable)
        self.recipient = recipient
        self.reason = reason
        self.original_error = original_error


class InvalidRecipientError(DeliveryError):
    """收件地址无效（不会因重试而恢复）"""

    def __init__(self, recipient: str) -> None:
        super().__init__(recipient, "收件地址无效", recoverable=False)
