"""NotificationSender 接口与工厂

调度任务只依赖 NotificationSender 协议；具体通道由 NotifyConfig.mode 决定。
"""

from typing import Protocol

import structlog

from .config import NotifyConfig
from .http_sender import HttpMailSender
from .log_sender import LogNotificationSender
from .models import DeliveryReceipt

log = structlog.get_logger()


class NotificationSender(Protocol):
    """通知投递接口"""

    async def send(self, recipient_address: str, subject: str, body: str) -> DeliveryReceipt:
        """投递通知，失败抛出 DeliveryError"""
        ...

    async def health_check(self) -> bool:
        """通道可达性检查，不抛出异常"""
        ...

    async def aclose(self) -> None:
        """释放通道资源"""
        ...


def create_sender(config: NotifyConfig) -> NotificationSender:
    """根据配置创建通知通道

    Args:
        config: NotifyConfig 实例

    Returns:
        http 模式返回 HttpMailSender，log 模式返回 LogNotificationSender
    """
    if config.mode == "http":
        log.info(
            "notification_sender_initialized",
            mode="http",
            api_url=config.mail_api_url,
            timeout_s=config.timeout_s,
        )
        return HttpMailSender(
            api_url=config.mail_api_url,
            api_key=config.mail_api_key.get_secret_value(),
            mail_from=config.mail_from,
            timeout_s=config.timeout_s,
        )

    log.info("notification_sender_initialized", mode="log")
    return LogNotificationSender()
