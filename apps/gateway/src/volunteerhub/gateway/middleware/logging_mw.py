"""LoggingMiddleware -- 请求级日志

每个 HTTP 请求绑定 request_id 到 structlog contextvars，并通过 X-Request-ID
响应头返回。外部触发方（cron、运维脚本）传入的 X-Request-ID 会被沿用，
便于把一次手动触发和它产生的 job 运行日志串起来。

手动触发 job 的路由把 run_id 写入 request.state，中间件在完成日志里带上 run_id，
并通过 X-Job-Run-ID 响应头返回。
"""

import re
import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"
RUN_ID_HEADER = "X-Job-Run-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


def resolve_request_id(incoming: str | None) -> str:
    """沿用合法的外部 request_id，否则生成 ULID"""
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            await log.aexception(
                "request_failed",
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            raise

        run_id = getattr(request.state, "run_id", None)
        if run_id:
            structlog.contextvars.bind_contextvars(run_id=run_id)
            response.headers[RUN_ID_HEADER] = run_id

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
