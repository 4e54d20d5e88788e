"""load_scheduler_config 环境变量映射测试"""

from datetime import time

import pytest
from volunteerhub.gateway.config import SchedulerConfig, load_scheduler_config

_ENV_VARS = [
    "VOLUNTEERHUB_SCHEDULER_ENABLED",
    "VOLUNTEERHUB_STATUS_JOB_ENABLED",
    "VOLUNTEERHUB_STATUS_JOB_TIME",
    "VOLUNTEERHUB_REMINDER_JOB_ENABLED",
    "VOLUNTEERHUB_REMINDER_JOB_TIME",
    "VOLUNTEERHUB_TIMEZONE",
    "VOLUNTEERHUB_JOB_LOCK_TTL_S",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestLoadSchedulerConfig:
    def test_defaults(self):
        config = load_scheduler_config()
        assert config == SchedulerConfig()
        assert config.reminder_job_enabled is False
        assert config.status_job_time == time(0, 0)
        assert config.reminder_job_time == time(8, 0)

    def test_env_mapping(self, monkeypatch):
        monkeypatch.setenv("VOLUNTEERHUB_SCHEDULER_ENABLED", "no")
        monkeypatch.setenv("VOLUNTEERHUB_REMINDER_JOB_ENABLED", "true")
        monkeypatch.setenv("VOLUNTEERHUB_REMINDER_JOB_TIME", "07:45")
        monkeypatch.setenv("VOLUNTEERHUB_STATUS_JOB_TIME", "01:15")
        monkeypatch.setenv("VOLUNTEERHUB_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("VOLUNTEERHUB_JOB_LOCK_TTL_S", "120")

        config = load_scheduler_config()
        assert config.scheduler_enabled is False
        assert config.reminder_job_enabled is True
        assert config.reminder_job_time == time(7, 45)
        assert config.status_job_time == time(1, 15)
        assert config.timezone == "Europe/Berlin"
        assert config.job_lock_ttl_s == 120

    @pytest.mark.parametrize(
        "env_var,value,field,expected",
        [
            ("VOLUNTEERHUB_REMINDER_JOB_ENABLED", "maybe", "reminder_job_enabled", False),
            ("VOLUNTEERHUB_STATUS_JOB_TIME", "25:99", "status_job_time", time(0, 0)),
            ("VOLUNTEERHUB_TIMEZONE", "Nowhere/City", "timezone", "UTC"),
            ("VOLUNTEERHUB_JOB_LOCK_TTL_S", "-1", "job_lock_ttl_s", 3600),
            ("VOLUNTEERHUB_JOB_LOCK_TTL_S", "soon", "job_lock_ttl_s", 3600),
        ],
    )
    def test_invalid_values_fall_back(self, monkeypatch, env_var, value, field, expected):
        monkeypatch.setenv(env_var, value)
        assert getattr(load_scheduler_config(), field) == expected
