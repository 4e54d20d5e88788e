"""SchedulerConfig -- 调度配置加载

提醒任务默认关闭：启用必须显式配置 VOLUNTEERHUB_REMINDER_JOB_ENABLED=true，
关闭状态会在启动时记录日志。
"""

import os
from datetime import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, Field, field_validator

log = structlog.get_logger()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SchedulerConfig(BaseModel):
    """调度配置 -- 从环境变量加载

    环境变量:
        VOLUNTEERHUB_SCHEDULER_ENABLED: 是否启动调度循环（默认 true）
        VOLUNTEERHUB_STATUS_JOB_ENABLED: 状态推进任务开关（默认 true）
        VOLUNTEERHUB_STATUS_JOB_TIME: 状态推进运行时间 HH:MM（默认 00:00）
        VOLUNTEERHUB_REMINDER_JOB_ENABLED: 提醒任务开关（默认 false）
        VOLUNTEERHUB_REMINDER_JOB_TIME: 提醒运行时间 HH:MM（默认 08:00）
        VOLUNTEERHUB_TIMEZONE: 计算"今天"使用的时区（默认 UTC）
        VOLUNTEERHUB_JOB_LOCK_TTL_S: 运行锁租约有效期（秒，默认 3600）
    """

    scheduler_enabled: bool = Field(default=True, description="是否启动调度循环")
    status_job_enabled: bool = Field(default=True, description="状态推进任务开关")
    status_job_time: time = Field(default=time(0, 0), description="状态推进运行时间")
    reminder_job_enabled: bool = Field(default=False, description="提醒任务开关")
    reminder_job_time: time = Field(default=time(8, 0), description="提醒运行时间")
    timezone: str = Field(default="UTC", description="IANA 时区名")
    job_lock_ttl_s: float = Field(default=3600, gt=0, description="运行锁租约有效期（秒）")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"未知时区: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _parse_bool(env_var: str, raw: str, fallback: bool) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    log.warning("invalid_bool_config", env_var=env_var, value=raw, fallback=fallback)
    return fallback


def _parse_time(env_var: str, raw: str, fallback: time) -> time:
    try:
        return time.fromisoformat(raw.strip())
    except ValueError:
        log.warning(
            "invalid_time_config",
            env_var=env_var,
            value=raw,
            fallback=fallback.isoformat(timespec="minutes"),
        )
        return fallback


def load_scheduler_config() -> SchedulerConfig:
    """从环境变量加载调度配置，非法值记录警告并回退默认值

    Returns:
        SchedulerConfig 实例
    """
    defaults = SchedulerConfig()
    kwargs: dict = {}

    for field_name, env_var in (
        ("scheduler_enabled", "VOLUNTEERHUB_SCHEDULER_ENABLED"),
        ("status_job_enabled", "VOLUNTEERHUB_STATUS_JOB_ENABLED"),
        ("reminder_job_enabled", "VOLUNTEERHUB_REMINDER_JOB_ENABLED"),
    ):
        if val := os.environ.get(env_var):
            kwargs[field_name] = _parse_bool(env_var, val, getattr(defaults, field_name))

    for field_name, env_var in (
        ("status_job_time", "VOLUNTEERHUB_STATUS_JOB_TIME"),
        ("reminder_job_time", "VOLUNTEERHUB_REMINDER_JOB_TIME"),
    ):
        if val := os.environ.get(env_var):
            kwargs[field_name] = _parse_time(env_var, val, getattr(defaults, field_name))

    if val := os.environ.get("VOLUNTEERHUB_TIMEZONE"):
        try:
            ZoneInfo(val)
            kwargs["timezone"] = val
        except (ZoneInfoNotFoundError, ValueError):
            log.warning("invalid_timezone_config", env_var="VOLUNTEERHUB_TIMEZONE", value=val, fallback="UTC")

    if val := os.environ.get("VOLUNTEERHUB_JOB_LOCK_TTL_S"):
        try:
            ttl = float(val)
            if ttl <= 0:
                raise ValueError(val)
            kwargs["job_lock_ttl_s"] = ttl
        except ValueError:
            log.warning(
                "invalid_lock_ttl_config",
                env_var="VOLUNTEERHUB_JOB_LOCK_TTL_S",
                value=val,
                fallback=defaults.job_lock_ttl_s,
            )

    return SchedulerConfig(**kwargs)
