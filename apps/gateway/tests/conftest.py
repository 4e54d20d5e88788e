"""apps/gateway 测试配置 -- 真实 SQLite StoreGroup + 可控通知通道 + FastAPI app"""

import asyncio
from collections.abc import AsyncGenerator
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from volunteerhub.core.store import StoreGroup, create_store_group
from volunteerhub.notify import DeliveryError, DeliveryReceipt


class ScriptedSender:
    """可按收件地址注入失败/挂起的通知通道"""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.attempts: list[str] = []
        self.fail_for: set[str] = set()
        self.crash_for: set[str] = set()
        self.hang_for: set[str] = set()
        self.healthy = True
        self.closed = False

    async def send(self, recipient_address: str, subject: str, body: str) -> DeliveryReceipt:
        self.attempts.append(recipient_address)
        if recipient_address in self.hang_for:
            await asyncio.sleep(3600)
        if recipient_address in self.fail_for:
            raise DeliveryError(recipient_address, "mailbox unavailable")
        if recipient_address in self.crash_for:
            raise RuntimeError("relay client bug")
        self.sent.append((recipient_address, subject, body))
        return DeliveryReceipt(recipient=recipient_address, subject=subject, provider="test")

    async def health_check(self) -> bool:
        return self.healthy

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def sender() -> ScriptedSender:
    return ScriptedSender()


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """Gateway 测试用 StoreGroup（真实 SQLite）"""
    sg = await create_store_group(str(tmp_path / "sqlite" / "gateway_test.db"))
    yield sg
    await sg.conn.close()


@pytest.fixture
def seed_event(store_group, make_task, make_volunteer):
    """录入一个活动及若干报名，返回 signup_id 列表"""

    async def _seed(
        task_id: str,
        event_date: date | None,
        volunteer_ids: list[str],
        application_deadline: date | None = None,
    ) -> list[str]:
        await store_group.task_store.create_task(
            make_task(task_id, event_date=event_date, application_deadline=application_deadline)
        )
        signup_ids = []
        for vid in volunteer_ids:
            if await store_group.volunteer_store.get_volunteer(vid) is None:
                await store_group.volunteer_store.create_volunteer(make_volunteer(vid))
            signup_id = f"{task_id}-{vid}"
            await store_group.signup_store.create_signup(signup_id, task_id, vid)
            signup_ids.append(signup_id)
        return signup_ids

    return _seed


@pytest_asyncio.fixture
async def app(store_group, sender, monkeypatch):
    """创建测试用 FastAPI app 实例（绕过 lifespan，手动装配组件）"""
    monkeypatch.setenv("VOLUNTEERHUB_SCHEDULER_ENABLED", "false")

    from volunteerhub.gateway.config import load_scheduler_config
    from volunteerhub.gateway.main import create_app
    from volunteerhub.gateway.services.job_scheduler import DailyJobScheduler
    from volunteerhub.gateway.services.wiring import build_job_runner

    application = create_app()
    scheduler_config = load_scheduler_config()
    runner = build_job_runner(store_group, sender, scheduler_config.job_lock_ttl_s)

    application.state.store_group = store_group
    application.state.sender = sender
    application.state.scheduler_config = scheduler_config
    application.state.job_runner = runner
    application.state.scheduler = DailyJobScheduler(runner, scheduler_config)
    yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
