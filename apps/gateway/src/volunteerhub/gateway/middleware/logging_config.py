"""structlog 配置模块

dev 模式：ConsoleRenderer 可读输出
json 模式：每行一个 JSON 事件，异常渲染为结构化 traceback

日志统一写 stderr，CLI 的 stdout 只输出运行结果。
"""

import logging
import os
import sys

import structlog

# 第三方库的 INFO 日志（每次 cron 触发、每次 HTTP 请求）降到 WARNING
_CHATTY_LOGGERS = ("apscheduler", "httpx", "httpcore")


def _resolve_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """初始化 structlog 配置

    VOLUNTEERHUB_LOG_FORMAT: "json" 或 "dev"（默认）
    VOLUNTEERHUB_LOG_LEVEL: 根 logger 级别（默认 INFO，非法值回退 INFO）。
    DEBUG 级别下不再压低第三方库日志。
    """
    log_format = os.environ.get("VOLUNTEERHUB_LOG_FORMAT", "dev")
    level = _resolve_level(os.environ.get("VOLUNTEERHUB_LOG_LEVEL", "INFO"))

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: structlog.types.Processor
    if log_format == "json":
        shared_processors.append(structlog.processors.dict_tracebacks)
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    chatty_level = logging.NOTSET if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)
