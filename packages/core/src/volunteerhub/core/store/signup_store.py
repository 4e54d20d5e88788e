"""SignupStore / VolunteerStore SQLite 实现

reminder_sent 的写入是 write-through：每次成功投递后立即提交，
且 UPDATE 条件保证已发送标记永远不会被重置。
"""

from datetime import UTC, date, datetime

import aiosqlite
import structlog

from ..models.signup import TaskSignup, Volunteer
from .task_store import SqliteTaskStore
from .transaction import read_guard, write_transaction

log = structlog.get_logger()

_SIGNUP_SELECT = """
SELECT s.signup_id, s.reminder_sent, s.reminder_sent_at, s.created_at,
       v.volunteer_id, v.name, v.email,
       t.task_id, t.title, t.description, t.location, t.event_date,
       t.application_deadline, t.status, t.created_at, t.updated_at
FROM task_signups s
JOIN tasks t ON t.task_id = s.task_id
JOIN volunteers v ON v.volunteer_id = s.volunteer_id
"""


class SqliteVolunteerStore:
    """VolunteerStore 的 SQLite 实现（仅供录入与读取）"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_volunteer(self, volunteer: Volunteer) -> None:
        """创建志愿者记录（立即提交）"""
        async with write_transaction(self._conn, "create_volunteer"):
            await self._conn.execute(
                """
                INSERT INTO volunteers (volunteer_id, name, email, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    volunteer.volunteer_id,
                    volunteer.name,
                    volunteer.email,
                    datetime.now(UTC).isoformat(),
                ),
            )

    async def get_volunteer(self, volunteer_id: str) -> Volunteer | None:
        """根据 volunteer_id 查询志愿者"""
        async with read_guard("get_volunteer"):
            cursor = await self._conn.execute(
                "SELECT volunteer_id, name, email FROM volunteers WHERE volunteer_id = ?",
                (volunteer_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return Volunteer(volunteer_id=row[0], name=row[1], email=row[2])


class SqliteSignupStore:
    """SignupStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_signup(
        self,
        signup_id: str,
        task_id: str,
        volunteer_id: str,
        created_at: datetime | None = None,
    ) -> None:
        """创建报名记录（立即提交），reminder_sent 初始为 False"""
        created = created_at or datetime.now(UTC)
        async with write_transaction(self._conn, "create_signup"):
            await self._conn.execute(
                """
                INSERT INTO task_signups (signup_id, task_id, volunteer_id,
                                          reminder_sent, reminder_sent_at, created_at)
                VALUES (?, ?, ?, 0, NULL, ?)
                """,
                (signup_id, task_id, volunteer_id, created.isoformat()),
            )

    async def get_signup(self, signup_id: str) -> TaskSignup | None:
        """根据 signup_id 查询报名（含志愿者与任务信息）"""
        async with read_guard("get_signup"):
            cursor = await self._conn.execute(
                _SIGNUP_SELECT + "WHERE s.signup_id = ?",
                (signup_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_signup(row)

    async def find_signups_for_date_with_reminder_pending(
        self,
        event_date: date,
    ) -> list[TaskSignup]:
        """查询活动日期为 event_date 且尚未发送提醒的报名（候选集）

        无法解析的行记录警告后跳过，reminder_sent 保持不变。
        """
        async with read_guard("find_signups_for_date_with_reminder_pending"):
            cursor = await self._conn.execute(
                _SIGNUP_SELECT
                + """
                WHERE t.event_date = ? AND s.reminder_sent = 0
                ORDER BY s.created_at ASC, s.signup_id ASC
                """,
                (event_date.isoformat(),),
            )
            rows = await cursor.fetchall()
        signups: list[TaskSignup] = []
        for row in rows:
            try:
                signups.append(self._row_to_signup(row))
            except ValueError as e:
                log.warning("signup_row_unreadable", signup_id=row[0], error=str(e))
        return signups

    async def save_signup(self, signup: TaskSignup) -> bool:
        """持久化提醒已发送标记（write-through，立即提交）

        只会把 reminder_sent 从 0 写为 1，不会重置。

        Returns:
            True 本次写入生效；False 标记未置位或已被其他调用写入

        Raises:
            PersistenceError: 写入失败
        """
        if not signup.reminder_sent:
            return False

        sent_at = signup.reminder_sent_at or datetime.now(UTC)
        async with write_transaction(self._conn, "save_signup"):
            cursor = await self._conn.execute(
                """
                UPDATE task_signups
                SET reminder_sent = 1, reminder_sent_at = ?
                WHERE signup_id = ? AND reminder_sent = 0
                """,
                (sent_at.isoformat(), signup.signup_id),
            )
            return cursor.rowcount == 1

    @staticmethod
    def _row_to_signup(row) -> TaskSignup:
        """将 _SIGNUP_SELECT 结果行转换为 TaskSignup 模型"""
        return TaskSignup(
            signup_id=row[0],
            reminder_sent=bool(row[1]),
            reminder_sent_at=datetime.fromisoformat(row[2]) if row[2] else None,
            created_at=datetime.fromisoformat(row[3]),
            volunteer=Volunteer(volunteer_id=row[4], name=row[5], email=row[6]),
            task=SqliteTaskStore.row_to_task(tuple(row)[7:]),
        )
