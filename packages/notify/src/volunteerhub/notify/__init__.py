"""VolunteerHub Notify -- 通知投递抽象层

packages/notify 的公开接口导出。
"""

# 配置
from .config import NotifyConfig, load_notify_config

# 异常
from .exceptions import DeliveryError, InvalidRecipientError, NotifyError

# 通道实现
from .http_sender import HttpMailSender
from .log_sender import LogNotificationSender

# 数据模型
from .models import DeliveryReceipt, SentNotification
from .sender import NotificationSender, create_sender

__all__ = [
    "DeliveryReceipt",
    "SentNotification",
    "NotificationSender",
    "HttpMailSender",
    "LogNotificationSender",
    "create_sender",
    "NotifyConfig",
    "load_notify_config",
    "NotifyError",
    "DeliveryError",
    "InvalidRecipientError",
]
