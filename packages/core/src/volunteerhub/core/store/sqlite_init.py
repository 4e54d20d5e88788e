"""SQLite 数据库初始化

PRAGMA 配置 + 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# volunteers 表 DDL
_VOLUNTEERS_DDL = """
CREATE TABLE IF NOT EXISTS volunteers (
    volunteer_id  TEXT PRIMARY KEY,
    name          TEXT NOT NULL DEFAULT '',
    email         TEXT NOT NULL DEFAULT '',
    created_at    TEXT NOT NULL
);
"""

# tasks 表 DDL（日期列为 ISO 格式 YYYY-MM-DD，允许为 NULL）
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id               TEXT PRIMARY KEY,
    title                 TEXT NOT NULL DEFAULT '',
    description           TEXT NOT NULL DEFAULT '',
    location              TEXT NOT NULL DEFAULT '',
    event_date            TEXT,
    application_deadline  TEXT,
    status                TEXT NOT NULL DEFAULT 'AVAILABLE',
    created_at            TEXT NOT NULL,
    updated_at            TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_event_date ON tasks(event_date);",
]

# task_signups 表 DDL
_SIGNUPS_DDL = """
CREATE TABLE IF NOT EXISTS task_signups (
    signup_id         TEXT PRIMARY KEY,
    task_id           TEXT NOT NULL,
    volunteer_id      TEXT NOT NULL,
    reminder_sent     INTEGER NOT NULL DEFAULT 0,
    reminder_sent_at  TEXT,
    created_at        TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id),
    FOREIGN KEY (volunteer_id) REFERENCES volunteers(volunteer_id)
);
"""

_SIGNUPS_INDEXES = [
    # 同一志愿者对同一任务只能报名一次
    (
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_signups_task_volunteer "
        "ON task_signups(task_id, volunteer_id);"
    ),
    "CREATE INDEX IF NOT EXISTS idx_signups_pending ON task_signups(reminder_sent, task_id);",
]

# job_runs 表 DDL（items 为 ItemResult 列表 JSON）
_JOB_RUNS_DDL = """
CREATE TABLE IF NOT EXISTS job_runs (
    run_id       TEXT PRIMARY KEY,
    job_name     TEXT NOT NULL,
    target_date  TEXT NOT NULL,
    started_at   TEXT NOT NULL,
    finished_at  TEXT,
    status       TEXT NOT NULL,
    error        TEXT NOT NULL DEFAULT '',
    items        TEXT NOT NULL DEFAULT '[]'
);
"""

_JOB_RUNS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_job_runs_job_started ON job_runs(job_name, started_at DESC);",
]

# job_locks 表 DDL（每个 job 一行租约）
_JOB_LOCKS_DDL = """
CREATE TABLE IF NOT EXISTS job_locks (
    job_name     TEXT PRIMARY KEY,
    holder       TEXT NOT NULL,
    acquired_at  TEXT NOT NULL,
    expires_at   TEXT NOT NULL
);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_VOLUNTEERS_DDL)
    await conn.execute(_TASKS_DDL)
    await conn.execute(_SIGNUPS_DDL)
    await conn.execute(_JOB_RUNS_DDL)
    await conn.execute(_JOB_LOCKS_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES + _SIGNUPS_INDEXES + _JOB_RUNS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
