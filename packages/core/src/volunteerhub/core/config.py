"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、提醒投递超时、运行记录查询上限等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("VOLUNTEERHUB_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "VOLUNTEERHUB_DB_PATH",
        str(_get_base_dir() / "sqlite" / "volunteerhub.db"),
    )


# 单次提醒投递超时（秒），防止一次无响应的投递拖住整批
REMINDER_SEND_TIMEOUT_S: float = float(
    os.environ.get("VOLUNTEERHUB_REMINDER_SEND_TIMEOUT_S", "30")
)

# 运行记录列表默认返回条数
JOB_RUNS_LIST_LIMIT: int = int(
    os.environ.get("VOLUNTEERHUB_JOB_RUNS_LIST_LIMIT", "20")
)
