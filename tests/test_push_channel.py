"""通用推送渠道测试"""
import json

import httpx
import pytest

from news_digest.domain.digest import PreviewItem
from news_digest.errors import ChannelConfigError, ChannelSendError
from news_digest.infrastructure.notifiers.push import (
    ALERT_PRIORITY,
    TRUNCATION_MARKER,
    PushChannel,
    truncate_body,
)


class TestTruncateBody:
    """正文截断测试类"""

    def test_long_body_is_truncated_to_exact_length(self):
        body = "新" * 5000

        result = truncate_body(body, 4000)

        assert len(result) == 4000
        assert result.endswith(TRUNCATION_MARKER)
        assert result[: -len(TRUNCATION_MARKER)] == body[: 4000 - len(TRUNCATION_MARKER)]

    def test_short_body_is_unchanged(self):
        assert truncate_body("短内容", 4000) == "短内容"

    def test_body_at_limit_is_unchanged(self):
        body = "x" * 4000
        assert truncate_body(body, 4000) == body

    def test_limit_shorter_than_marker_is_rejected(self):
        with pytest.raises(ValueError):
            truncate_body("x" * 100, len(TRUNCATION_MARKER))


def _recording_transport(requests, response_json, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=response_json)

    return httpx.MockTransport(handler)


class TestPushChannel:
    """通用推送测试类"""

    def test_missing_config_raises_config_error(self):
        with pytest.raises(ChannelConfigError):
            PushChannel(url="", token="token")
        with pytest.raises(ChannelConfigError):
            PushChannel(url="http://push.local/message", token="")

    def test_payload_markdown(self):
        channel = PushChannel(url="http://push.local/message", token="t", priority=3)
        payload = channel.build_payload("标题", "1. [a](http://a)")

        assert payload == {
            "title": "标题",
            "message": "1. [a](http://a)",
            "priority": 3,
            "extras": {"client::display": {"contentType": "text/markdown"}},
        }

    def test_payload_plain_text(self):
        channel = PushChannel(url="http://push.local/message", token="t", markdown=False)
        payload = channel.build_payload("标题", "# 今日\n1. [a](http://a)")

        assert payload["message"] == "今日\n1. a (http://a)"
        assert payload["extras"]["client::display"]["contentType"] == "text/plain"

    def test_payload_is_truncated(self):
        channel = PushChannel(url="http://push.local/message", token="t", max_length=100)
        payload = channel.build_payload("标题", "x" * 500)

        assert len(payload["message"]) == 100
        assert payload["message"].endswith(TRUNCATION_MARKER)

    def test_alert_raises_priority(self):
        channel = PushChannel(url="http://push.local/message", token="t", priority=2)
        assert channel.build_payload("t", "b", alert=True)["priority"] == ALERT_PRIORITY

    @pytest.mark.asyncio
    async def test_send_success(self):
        requests = []
        channel = PushChannel(
            url="http://push.local/message",
            token="secret",
            transport=_recording_transport(requests, {"id": 42}),
        )

        ok = await channel.send_news("📰 今日新闻", [PreviewItem(title="a", url="http://a")])

        assert ok is True
        assert len(requests) == 1
        assert requests[0].headers["Authorization"] == "Bearer secret"
        body = json.loads(requests[0].content)
        assert body["message"] == "1. [a](http://a)\n\n---\n"

    @pytest.mark.asyncio
    async def test_send_without_id_fails(self):
        channel = PushChannel(
            url="http://push.local/message",
            token="secret",
            transport=_recording_transport([], {"error": "Unauthorized"}, status_code=401),
        )
        assert await channel.send_markdown("t", "b") is False

    @pytest.mark.asyncio
    async def test_send_network_error_fails(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        channel = PushChannel(
            url="http://push.local/message",
            token="secret",
            transport=httpx.MockTransport(handler),
        )
        assert await channel.send_markdown("t", "b") is False

    @pytest.mark.asyncio
    async def test_post_raises_send_error_without_id(self):
        channel = PushChannel(
            url="http://push.local/message",
            token="secret",
            transport=_recording_transport([], {"error": "Unauthorized"}, status_code=401),
        )
        with pytest.raises(ChannelSendError):
            await channel._post(channel.build_payload("t", "b"))
