"""端到端：一周内的每日调度周期

真实 SQLite + log 通知通道，通过 HTTP 手动触发逐日运行，验证：
1. 任务状态随日期单调推进
2. 每个报名只收到一次提醒
3. 运行记录可查询
"""

from datetime import date, timedelta

from httpx import AsyncClient


async def _seed(store_group, make_task, make_volunteer):
    await store_group.task_store.create_task(
        make_task("T1", event_date=date(2024, 1, 10), application_deadline=date(2024, 1, 5), title="Park Restoration")
    )
    await store_group.task_store.create_task(
        make_task("T2", event_date=date(2024, 1, 8), application_deadline=date(2024, 1, 7), title="Soup Kitchen")
    )
    for vid in ("V1", "V2", "V3"):
        await store_group.volunteer_store.create_volunteer(make_volunteer(vid))
    await store_group.signup_store.create_signup("S1", "T1", "V1")
    await store_group.signup_store.create_signup("S2", "T1", "V2")
    await store_group.signup_store.create_signup("S3", "T2", "V3")


class TestDailyCycle:
    async def test_week_of_runs(self, client: AsyncClient, integration_app, make_task, make_volunteer):
        store_group = integration_app.state.store_group
        sender = integration_app.state.sender
        await _seed(store_group, make_task, make_volunteer)

        history: dict[str, list[str]] = {"T1": [], "T2": []}
        day = date(2024, 1, 4)
        while day <= date(2024, 1, 12):
            for job in ("task_status_advance", "reminder_dispatch"):
                resp = await client.post(f"/api/jobs/{job}/run", params={"date": day.isoformat()})
                assert resp.status_code == 200
                assert resp.json()["status"] == "SUCCEEDED"
            for tid in history:
                history[tid].append((await store_group.task_store.get_task(tid)).status.value)
            day += timedelta(days=1)

        # 1/4..1/12 共 9 天
        assert history["T1"] == ["AVAILABLE"] * 2 + ["APPLICATION_ENDED"] * 5 + ["ENDED"] * 2
        assert history["T2"] == ["AVAILABLE"] * 4 + ["APPLICATION_ENDED"] + ["ENDED"] * 4

        recipients = sorted(n.recipient for n in sender.sent)
        assert recipients == ["v1@example.org", "v2@example.org", "v3@example.org"]
        soup = next(n for n in sender.sent if n.recipient == "v3@example.org")
        assert "Soup Kitchen" in soup.body
        assert "2024-01-08" in soup.body

        resp = await client.get("/api/jobs/runs", params={"limit": 100})
        assert len(resp.json()["runs"]) == 18

    async def test_failed_reminder_retried_next_day(self, client: AsyncClient, integration_app, make_task, make_volunteer):
        """投递失败的报名在下一次运行时重新投递"""
        store_group = integration_app.state.store_group
        await store_group.task_store.create_task(make_task("T1", event_date=date(2024, 3, 2)))
        await store_group.volunteer_store.create_volunteer(make_volunteer("V1", email="not-an-address"))
        await store_group.signup_store.create_signup("S1", "T1", "V1")

        resp = await client.post("/api/jobs/reminder_dispatch/run", params={"date": "2024-03-01"})
        assert resp.json()["status"] == "PARTIAL"
        assert (await store_group.signup_store.get_signup("S1")).reminder_sent is False

        # 修正地址后再次运行
        await store_group.conn.execute(
            "UPDATE volunteers SET email = ? WHERE volunteer_id = ?", ("v1@example.org", "V1")
        )
        await store_group.conn.commit()

        resp = await client.post("/api/jobs/reminder_dispatch/run", params={"date": "2024-03-01"})
        assert resp.json()["succeeded"] == 1
        assert (await store_group.signup_store.get_signup("S1")).reminder_sent is True
