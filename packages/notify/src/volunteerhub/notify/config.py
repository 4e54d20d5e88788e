"""NotifyConfig -- 通知通道配置加载

从环境变量加载配置，不硬编码邮件服务地址。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class NotifyConfig(BaseModel):
    """Notify 包配置 -- 从环境变量加载

    环境变量:
        VOLUNTEERHUB_NOTIFY_MODE: 通知模式（http/log）
        VOLUNTEERHUB_MAIL_API_URL: 邮件中继 HTTP API 地址
        VOLUNTEERHUB_MAIL_API_KEY: 邮件中继访问密钥
        VOLUNTEERHUB_MAIL_FROM: 发件地址
        VOLUNTEERHUB_NOTIFY_TIMEOUT_S: 单次请求超时（秒，默认 10）
    """

    mode: Literal["http", "log"] = Field(
        default="log",
        description="通知模式：http 走邮件中继 / log 仅记录日志",
    )
    mail_api_url: str = Field(
        default="http://localhost:8025/api/send",
        description="邮件中继 HTTP API 地址",
    )
    mail_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="邮件中继访问密钥",
    )
    mail_from: str = Field(
        default="noreply@volunteer-platform.local",
        description="发件地址",
    )
    timeout_s: float = Field(
        default=10,
        gt=0,
        description="单次请求超时（秒）",
    )


def load_notify_config() -> NotifyConfig:
    """从环境变量加载 Notify 配置

    Returns:
        NotifyConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("VOLUNTEERHUB_NOTIFY_MODE"):
        if val in ("http", "log"):
            kwargs["mode"] = val
        else:
            log.warning(
                "invalid_notify_mode_config",
                env_var="VOLUNTEERHUB_NOTIFY_MODE",
                value=val,
                fallback="log",
            )

    if val := os.environ.get("VOLUNTEERHUB_MAIL_API_URL"):
        kwargs["mail_api_url"] = val

    if val := os.environ.get("VOLUNTEERHUB_MAIL_API_KEY"):
        kwargs["mail_api_key"] = SecretStr(val)

    if val := os.environ.get("VOLUNTEERHUB_MAIL_FROM"):
        kwargs["mail_from"] = val

    if val := os.environ.get("VOLUNTEERHUB_NOTIFY_TIMEOUT_S"):
        try:
            timeout_s = float(val)
            if timeout_s <= 0:
                raise ValueError(val)
            kwargs["timeout_s"] = timeout_s
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="VOLUNTEERHUB_NOTIFY_TIMEOUT_S",
                value=val,
                fallback=10,
            )
            # 使用默认值，不阻塞启动

    return NotifyConfig(**kwargs)
