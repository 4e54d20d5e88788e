"""TaskStore SQLite 实现

状态写入使用 compare-and-set：只有当库中状态仍为 expected_status 时才更新，
避免重叠运行互相覆盖。
"""

from datetime import UTC, date, datetime

import aiosqlite
import structlog

from ..models.enums import TaskStatus
from ..models.task import Task
from .transaction import read_guard, write_transaction

log = structlog.get_logger()

_TASK_COLUMNS = (
    "task_id, title, description, location, event_date, "
    "application_deadline, status, created_at, updated_at"
)


def _date_or_none(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录（立即提交）"""
        async with write_transaction(self._conn, "create_task"):
            await self._conn.execute(
                f"""
                INSERT INTO tasks ({_TASK_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.task_id,
                    task.title,
                    task.description,
                    task.location,
                    task.event_date.isoformat() if task.event_date else None,
                    (
                        task.application_deadline.isoformat()
                        if task.application_deadline
                        else None
                    ),
                    str(task.status),
                    task.created_at.isoformat(),
                    task.updated_at.isoformat(),
                ),
            )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        async with read_guard("get_task"):
            cursor = await self._conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id = ?",
                (task_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self.row_to_task(row)

    async def list_all_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 正序

        无法解析的行（日期格式损坏等）记录警告后跳过，不影响其余任务。
        """
        async with read_guard("list_all_tasks"):
            cursor = await self._conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks ORDER BY created_at ASC, task_id ASC"
            )
            rows = await cursor.fetchall()
        tasks: list[Task] = []
        for row in rows:
            try:
                tasks.append(self.row_to_task(row))
            except ValueError as e:
                log.warning("task_row_unreadable", task_id=row[0], error=str(e))
        return tasks

    async def save_task_status(
        self,
        task: Task,
        expected_status: TaskStatus | str,
    ) -> bool:
        """持久化单个任务的状态变更（立即提交）

        Args:
            task: 已通过 advance() 更新状态的任务
            expected_status: 变更前的状态

        Returns:
            True 写入成功；False 库中状态已被其他调用修改

        Raises:
            PersistenceError: 写入失败
        """
        now = datetime.now(UTC)
        async with write_transaction(self._conn, "save_task_status"):
            cursor = await self._conn.execute(
                """
                UPDATE tasks
                SET status = ?, updated_at = ?
                WHERE task_id = ? AND status = ?
                """,
                (str(task.status), now.isoformat(), task.task_id, str(expected_status)),
            )
            updated = cursor.rowcount == 1
        if updated:
            task.updated_at = now
        return updated

    @staticmethod
    def row_to_task(row) -> Task:
        """将数据库行（_TASK_COLUMNS 顺序）转换为 Task 模型"""
        return Task(
            task_id=row[0],
            title=row[1],
            description=row[2],
            location=row[3],
            event_date=_date_or_none(row[4]),
            application_deadline=_date_or_none(row[5]),
            status=row[6],
            created_at=datetime.fromisoformat(row[7]),
            updated_at=datetime.fromisoformat(row[8]),
        )
