"""packages/notify 测试配置 -- 邮件中继 MockTransport fixture"""

import json

import httpx
import pytest


class RelayRecorder:
    """记录中继收到的请求，并按预设返回响应"""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.response_json: dict | None = {"message_id": "msg-001"}
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.response_json is None:
            return httpx.Response(self.status_code, text="accepted")
        return httpx.Response(self.status_code, json=self.response_json)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def relay() -> RelayRecorder:
    return RelayRecorder()


@pytest.fixture
def relay_client(relay: RelayRecorder) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(relay.handler))
