"""依赖注入模块 -- 通过 FastAPI Depends 注入运行时组件

组件实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from volunteerhub.core.store import StoreGroup

from .services.job_runner import JobRunner


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_job_runner(request: Request) -> JobRunner:
    """从 app.state 获取 JobRunner 实例"""
    return request.app.state.job_runner
