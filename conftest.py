"""全局 pytest 配置 -- 临时 SQLite 数据库 + 领域对象构造 fixture"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, date, datetime
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from volunteerhub.core.models import Task, TaskSignup, TaskStatus, Volunteer


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from volunteerhub.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


def _make_task(
    task_id: str,
    event_date: date | None = None,
    application_deadline: date | None = None,
    status: TaskStatus | str = TaskStatus.AVAILABLE,
    title: str = "Beach Cleanup",
) -> Task:
    now = datetime.now(UTC)
    return Task(
        task_id=task_id,
        title=title,
        description="Collect litter along the shore",
        location="North Beach",
        event_date=event_date,
        application_deadline=application_deadline,
        status=status,
        created_at=now,
        updated_at=now,
    )


def _make_volunteer(volunteer_id: str, email: str | None = None) -> Volunteer:
    return Volunteer(
        volunteer_id=volunteer_id,
        name=f"Volunteer {volunteer_id}",
        email=email or f"{volunteer_id.lower()}@example.org",
    )


def _make_signup(
    signup_id: str,
    task: Task,
    volunteer: Volunteer,
    reminder_sent: bool = False,
) -> TaskSignup:
    return TaskSignup(
        signup_id=signup_id,
        task=task,
        volunteer=volunteer,
        reminder_sent=reminder_sent,
        reminder_sent_at=datetime.now(UTC) if reminder_sent else None,
        created_at=datetime.now(UTC),
    )


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """构造测试用 Task"""
    return _make_task


@pytest.fixture
def make_volunteer() -> Callable[..., Volunteer]:
    """构造测试用 Volunteer"""
    return _make_volunteer


@pytest.fixture
def make_signup() -> Callable[..., TaskSignup]:
    """构造测试用 TaskSignup（不落库）"""
    return _make_signup
