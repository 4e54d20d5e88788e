"""存储层事务封装

写操作在独立事务内提交（write-through），失败时回滚并包装为 PersistenceError；
读操作失败同样包装为 PersistenceError，由调用方决定是否终止本次运行。
"""

import contextlib
from collections.abc import AsyncIterator

import aiosqlite

from ..exceptions import PersistenceError

# 连接已关闭时 aiosqlite 抛出 ValueError 而不是 sqlite3.Error
DB_ERRORS: tuple[type[Exception], ...] = (aiosqlite.Error, ValueError)


@contextlib.asynccontextmanager
async def write_transaction(
    conn: aiosqlite.Connection,
    operation: str,
) -> AsyncIterator[None]:
    """在同一事务内执行写操作并立即提交

    Args:
        conn: 数据库连接
        operation: 操作名称（用于错误信息）

    Raises:
        PersistenceError: 写入或提交失败，事务已回滚
    """
    try:
        yield
        await conn.commit()
    except DB_ERRORS as e:
        with contextlib.suppress(*DB_ERRORS):
            await conn.rollback()
        raise PersistenceError(operation, e) from e


@contextlib.asynccontextmanager
async def read_guard(operation: str) -> AsyncIterator[None]:
    """将读操作的数据库异常包装为 PersistenceError"""
    try:
        yield
    except DB_ERRORS as e:
        raise PersistenceError(operation, e) from e
