"""VolunteerHub Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from .job_lock_store import SqliteJobLockStore
from .job_run_store import SqliteJobRunStore
from .signup_store import SqliteSignupStore, SqliteVolunteerStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import read_guard, write_transaction


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.task_store = SqliteTaskStore(conn)
        self.volunteer_store = SqliteVolunteerStore(conn)
        self.signup_store = SqliteSignupStore(conn)
        self.job_run_store = SqliteJobRunStore(conn)
        self.job_lock_store = SqliteJobLockStore(conn)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteVolunteerStore",
    "SqliteSignupStore",
    "SqliteJobRunStore",
    "SqliteJobLockStore",
    "init_db",
    "read_guard",
    "write_transaction",
]
