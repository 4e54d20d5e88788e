"""JobLockStore SQLite 实现 -- 调度任务运行锁（租约）

每个 job 一行租约。租约过期后可被其他调用接管，
崩溃的运行不会永久阻塞后续运行。
"""

from datetime import UTC, datetime, timedelta

import aiosqlite

from .transaction import read_guard, write_transaction


class SqliteJobLockStore:
    """JobLockStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def acquire(
        self,
        job_name: str,
        holder: str,
        ttl_s: float,
        now: datetime | None = None,
    ) -> bool:
        """尝试获取租约

        Args:
            job_name: 调度任务名称
            holder: 持有者标识（通常为 run_id）
            ttl_s: 租约有效期（秒）
            now: 当前时间，默认 UTC 当前时间

        Returns:
            True 获取成功；False 租约被其他持有者占用且未过期
        """
        now = now or datetime.now(UTC)
        expires_at = now + timedelta(seconds=ttl_s)
        async with write_transaction(self._conn, "acquire_job_lock"):
            # 无租约时插入；租约已过期或本身持有时接管
            cursor = await self._conn.execute(
                """
                INSERT INTO job_locks (job_name, holder, acquired_at, expires_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(job_name) DO UPDATE
                SET holder = excluded.holder,
                    acquired_at = excluded.acquired_at,
                    expires_at = excluded.expires_at
                WHERE job_locks.expires_at <= ? OR job_locks.holder = excluded.holder
                """,
                (job_name, holder, now.isoformat(), expires_at.isoformat(), now.isoformat()),
            )
            return cursor.rowcount == 1

    async def release(self, job_name: str, holder: str) -> None:
        """释放租约（仅持有者可释放）"""
        async with write_transaction(self._conn, "release_job_lock"):
            await self._conn.execute(
                "DELETE FROM job_locks WHERE job_name = ? AND holder = ?",
                (job_name, holder),
            )

    async def get_holder(self, job_name: str) -> str | None:
        """查询当前租约持有者"""
        async with read_guard("get_job_lock_holder"):
            cursor = await self._conn.execute(
                "SELECT holder FROM job_locks WHERE job_name = ?",
                (job_name,),
            )
            row = await cursor.fetchone()
        return row[0] if row else None
