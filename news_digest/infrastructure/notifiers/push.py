"""
通用推送渠道（Gotify 风格的 webhook）

POST {title, message, priority, extras} 到配置的地址，返回内容带 id 视为成功。
Docs: https://gotify.net/api-docs
"""
from typing import Any, Dict, Optional, Sequence

import httpx
from loguru import logger

from ...domain.digest.card_fields import markdown_to_plain
from ...domain.digest.models import PreviewItem
from ...domain.digest.render import render_preview
from ...errors import ChannelConfigError, ChannelSendError

TRUNCATION_MARKER = "\n\n...(内容已截断)"
# 错误通知的最低优先级
ALERT_PRIORITY = 8


def truncate_body(body: str, max_length: int, marker: str = TRUNCATION_MARKER) -> str:
    """
    超过长度上限时截断正文并追加截断标记。

    截断后的总长度正好是 max_length，标记本身不会被截断。
    """
    if len(body) <= max_length:
        return body
    if max_length <= len(marker):
        raise ValueError(f"max_length={max_length} must be longer than the truncation marker")
    return body[: max_length - len(marker)] + marker


class PushChannel:
    """通用 webhook 推送"""

    name = "push"

    def __init__(
        self,
        url: str,
        token: str,
        priority: int = 5,
        markdown: bool = True,
        timeout: float = 10.0,
        max_length: int = 4000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not url or not token:
            raise ChannelConfigError("PUSH_URL / PUSH_TOKEN not set")
        if max_length <= len(TRUNCATION_MARKER):
            raise ValueError(f"max_length={max_length} must be longer than the truncation marker")

        self.url = url
        self.token = token
        self.priority = priority
        self.markdown = markdown
        self.timeout = timeout
        self.max_length = max_length
        self._transport = transport

    def build_payload(self, title: str, body: str, alert: bool = False) -> Dict[str, Any]:
        message = body if self.markdown else markdown_to_plain(body)
        message = truncate_body(message, self.max_length)
        content_type = "text/markdown" if self.markdown else "text/plain"
        return {
            "title": title,
            "message": message,
            "priority": max(self.priority, ALERT_PRIORITY) if alert else self.priority,
            "extras": {"client::display": {"contentType": content_type}},
        }

    async def _post(self, payload: Dict[str, Any]) -> Any:
        """
        发送一条消息，返回服务端分配的消息 id

        Raises:
            ChannelSendError: 网络错误、响应无法解析或响应中没有 id
        """
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=payload, headers=headers)
                data = resp.json()
        except httpx.HTTPError as exc:
            raise ChannelSendError(f"通用推送请求失败: {exc}") from exc
        except ValueError as exc:
            raise ChannelSendError(f"通用推送响应解析失败: {exc}") from exc

        if not isinstance(data, dict) or data.get("id") is None:
            raise ChannelSendError(f"通用推送发送失败: {data}")
        return data["id"]

    async def send_markdown(self, title: str, body: str, alert: bool = False) -> bool:
        try:
            message_id = await self._post(self.build_payload(title, body, alert=alert))
        except ChannelSendError as exc:
            logger.error(f"[新闻推送] {exc}")
            return False

        logger.info(f"[新闻推送] 通用推送发送成功, id={message_id}")
        return True

    async def send_news(self, title: str, items: Sequence[PreviewItem]) -> bool:
        return await self.send_markdown(title, render_preview(items))
