"""HttpMailSender -- 邮件中继 HTTP API 投递

通过 httpx.AsyncClient 把邮件 POST 到中继服务，每次请求带超时。
连接失败、超时、非 2xx 响应统一转换为 DeliveryError。
"""

import re
import time

import httpx
import structlog

from .exceptions import DeliveryError, InvalidRecipientError
from .models import DeliveryReceipt

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# 对端可能稍后恢复的状态码
_RETRYABLE_STATUS_CODES = {408, 429}


def is_valid_address(address: str) -> bool:
    """粗粒度校验收件地址格式"""
    return bool(address) and _EMAIL_PATTERN.match(address) is not None


class HttpMailSender:
    """邮件中继 HTTP 客户端"""

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        mail_from: str = "noreply@volunteer-platform.local",
        timeout_s: float = 10,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """初始化邮件中继客户端

        Args:
            api_url: 中继发送接口地址
            api_key: 中继访问密钥
            mail_from: 发件地址
            timeout_s: 单次请求超时（秒）
            http_client: 外部提供的 httpx 客户端（测试注入 MockTransport），
                None 时每次调用临时创建
        """
        self._api_url = api_url
        self._api_key = api_key
        self._mail_from = mail_from
        self._timeout_s = timeout_s
        self._http_client = http_client

    async def send(self, recipient_address: str, subject: str, body: str) -> DeliveryReceipt:
        """投递一封纯文本邮件

        Returns:
            DeliveryReceipt

        Raises:
            InvalidRecipientError: 收件地址无效
            DeliveryError: 连接失败、超时或中继返回非 2xx
        """
        if not is_valid_address(recipient_address):
            raise InvalidRecipientError(recipient_address)

        payload = {
            "from": self._mail_from,
            "to": recipient_address,
            "subject": subject,
            "text": body,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        start_time = time.monotonic()

        try:
            if self._http_client is not None:
                resp = await self._http_client.post(
                    self._api_url, json=payload, headers=headers, timeout=self._timeout_s
                )
            else:
                async with httpx.AsyncClient() as http_client:
                    resp = await http_client.post(
                        self._api_url, json=payload, headers=headers, timeout=self._timeout_s
                    )
        except httpx.TimeoutException as e:
            log.warning("mail_relay_timeout", recipient=recipient_address, timeout_s=self._timeout_s)
            raise DeliveryError(recipient_address, "请求超时", original_error=e) from e
        except httpx.HTTPError as e:
            log.warning(
                "mail_relay_unreachable",
                recipient=recipient_address,
                error_type=type(e).__name__,
            )
            raise DeliveryError(recipient_address, f"中继不可达: {e}", original_error=e) from e

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if not resp.is_success:
            recoverable = resp.status_code >= 500 or resp.status_code in _RETRYABLE_STATUS_CODES
            raise DeliveryError(
                recipient_address,
                f"中继返回 HTTP {resp.status_code}",
                recoverable=recoverable,
            )

        message_id = ""
        try:
            data = resp.json()
            if isinstance(data, dict):
                message_id = str(data.get("message_id") or data.get("id") or "")
        except ValueError:
            # 中继返回非 JSON 内容时不影响投递结果
            message_id = ""

        log.debug(
            "mail_relay_accepted",
            recipient=recipient_address,
            message_id=message_id,
            duration_ms=duration_ms,
        )
        return DeliveryReceipt(
            recipient=recipient_address,
            subject=subject,
            provider="http",
            message_id=message_id,
            duration_ms=duration_ms,
        )

    async def health_check(self) -> bool:
        """检查邮件中继可达性

        对 api_url 所在服务发送 GET 请求，任何 HTTP 响应都视为可达。

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        url = str(httpx.URL(self._api_url).join("/"))
        try:
            if self._http_client is not None:
                await self._http_client.get(url, timeout=HEALTH_CHECK_TIMEOUT_S)
            else:
                async with httpx.AsyncClient() as http_client:
                    await http_client.get(url, timeout=HEALTH_CHECK_TIMEOUT_S)
            return True
        except Exception as e:
            log.debug("mail_relay_health_check_failed", url=url, error=str(e))
            return False

    async def aclose(self) -> None:
        """关闭外部注入的 httpx 客户端"""
        if self._http_client is not None:
            await self._http_client.aclose()
