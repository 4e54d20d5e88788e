"""Notify 数据模型"""

from pydantic import BaseModel, Field


class DeliveryReceipt(BaseModel):
    """一次成功投递的回执"""

    recipient: str = Field(description="收件地址")
    subject: str = Field(description="主题")
    provider: str = Field(description="投递通道，如 http / log")
    message_id: str = Field(default="", description="通道返回的消息 ID")
    duration_ms: int = Field(default=0, ge=0, description="投递耗时（毫秒）")


class SentNotification(BaseModel):
    """log 模式下记录的已发送通知"""

    recipient: str
    subject: str
    body: str
