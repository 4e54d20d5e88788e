"""LogNotificationSender -- log 模式通知通道

不访问网络，只输出结构化日志，并在内存中保留最近的若干条通知。
开发环境和测试使用此通道。
"""

from collections import deque

import structlog

from .exceptions import InvalidRecipientError
from .http_sender import is_valid_address
from .models import DeliveryReceipt, SentNotification

log = structlog.get_logger()


class LogNotificationSender:
    """log 模式通知通道"""

    def __init__(self, history_size: int = 100) -> None:
        """
        Args:
            history_size: 内存中保留的最近通知条数，超出后丢弃最早的记录
        """
        self.sent: deque[SentNotification] = deque(maxlen=history_size)
        self.delivered = 0

    async def send(self, recipient_address: str, subject: str, body: str) -> DeliveryReceipt:
        """记录通知

        Raises:
            InvalidRecipientError: 收件地址无效（与 http 模式保持一致）
        """
        if not is_valid_address(recipient_address):
            raise InvalidRecipientError(recipient_address)

        self.delivered += 1
        self.sent.append(
            SentNotification(recipient=recipient_address, subject=subject, body=body)
        )
        log.info(
            "notification_logged",
            recipient=recipient_address,
            subject=subject,
            body_length=len(body),
        )
        return DeliveryReceipt(
            recipient=recipient_address,
            subject=subject,
            provider="log",
            message_id=str(self.delivered),
        )

    async def health_check(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None
