"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from volunteerhub.core.store import create_store_group
from volunteerhub.notify import LogNotificationSender


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, monkeypatch):
    """集成测试用 FastAPI app：真实 SQLite + log 模式通知通道"""
    monkeypatch.setenv("VOLUNTEERHUB_DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("VOLUNTEERHUB_SCHEDULER_ENABLED", "false")

    from volunteerhub.gateway.config import load_scheduler_config
    from volunteerhub.gateway.main import create_app
    from volunteerhub.gateway.services.job_scheduler import DailyJobScheduler
    from volunteerhub.gateway.services.wiring import build_job_runner

    app = create_app()

    store_group = await create_store_group(str(tmp_path / "test.db"))
    sender = LogNotificationSender()
    scheduler_config = load_scheduler_config()
    runner = build_job_runner(store_group, sender)
    app.state.store_group = store_group
    app.state.sender = sender
    app.state.scheduler_config = scheduler_config
    app.state.job_runner = runner
    app.state.scheduler = DailyJobScheduler(runner, scheduler_config)

    yield app

    await store_group.conn.close()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
