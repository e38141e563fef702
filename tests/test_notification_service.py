"""通知分发测试"""
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from news_digest.config_loader import Settings
from news_digest.domain.digest import PreviewItem
from news_digest.errors import ChannelSendError
from news_digest.infrastructure.notifiers import ConsoleChannel, FeishuChannel, PushChannel
from news_digest.services import NotificationDispatcher


def _channel(name, result=True, error=None):
    channel = MagicMock()
    channel.name = name
    channel.send_markdown = AsyncMock(return_value=result, side_effect=error)
    channel.send_news = AsyncMock(return_value=result, side_effect=error)
    return channel


def _console():
    return _channel("console")


class TestNotificationDispatcher:
    """通知分发测试类"""

    @pytest.mark.asyncio
    async def test_markdown_goes_to_every_channel(self):
        push, feishu, console = _channel("push"), _channel("feishu"), _console()
        dispatcher = NotificationDispatcher([push, feishu], fallback=console)

        outcome = await dispatcher.dispatch("标题", "内容")

        assert outcome == {"push": True, "feishu": True}
        push.send_markdown.assert_awaited_once_with("标题", "内容", alert=False)
        feishu.send_markdown.assert_awaited_once_with("标题", "内容", alert=False)
        console.send_markdown.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_news_items_use_send_news(self):
        push = _channel("push")
        items = [PreviewItem(title="a", url="http://a")]
        dispatcher = NotificationDispatcher([push], fallback=_console())

        await dispatcher.dispatch("标题", items)

        push.send_news.assert_awaited_once_with("标题", items)
        push.send_markdown.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_channel_exception_does_not_stop_others(self):
        push = _channel("push", error=RuntimeError("boom"))
        feishu = _channel("feishu")
        dispatcher = NotificationDispatcher([push, feishu], fallback=_console())

        outcome = await dispatcher.dispatch("标题", "内容", alert=True)

        assert outcome == {"push": False, "feishu": True}
        feishu.send_markdown.assert_awaited_once_with("标题", "内容", alert=True)

    @pytest.mark.asyncio
    async def test_send_error_is_reported_as_failure(self):
        """渠道抛出 ChannelSendError 时记为发送失败，并降级到控制台"""
        push = _channel("push", error=ChannelSendError("通用推送发送失败"))
        console = _console()
        dispatcher = NotificationDispatcher([push], fallback=console)

        outcome = await dispatcher.dispatch("标题", "内容")

        assert outcome == {"push": False, "console": True}
        console.send_markdown.assert_awaited_once_with("标题", "内容", alert=False)

    @pytest.mark.asyncio
    async def test_all_channels_failing_falls_back_to_console(self):
        push, feishu, console = _channel("push", result=False), _channel("feishu", result=False), _console()
        dispatcher = NotificationDispatcher([push, feishu], fallback=console)

        outcome = await dispatcher.dispatch("标题", "内容")

        assert outcome == {"push": False, "feishu": False, "console": True}
        console.send_markdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_channels_uses_console(self):
        console = _console()
        dispatcher = NotificationDispatcher([], fallback=console)

        outcome = await dispatcher.dispatch("标题", "内容")

        assert outcome == {"console": True}

    @pytest.mark.asyncio
    async def test_real_console_channel(self):
        dispatcher = NotificationDispatcher([])
        assert await dispatcher.dispatch("标题", [PreviewItem(title="a", url="b")]) == {"console": True}


class TestFromSettings:
    """按配置创建渠道"""

    def test_unconfigured_channels_are_skipped(self, tmp_path):
        dispatcher = NotificationDispatcher.from_settings(Settings(output_dir=tmp_path))
        assert dispatcher.channels == []
        assert isinstance(dispatcher.fallback, ConsoleChannel)

    def test_configured_channels_are_created(self, tmp_path):
        settings = Settings(
            output_dir=tmp_path,
            push_url="http://push.local/message",
            push_token="t",
            push_priority=7,
            feishu_webhook="https://open.feishu.cn/open-apis/bot/v2/hook/x",
        )
        dispatcher = NotificationDispatcher.from_settings(settings)

        assert dispatcher.channel_names == ["push", "feishu"]
        push, feishu = dispatcher.channels
        assert isinstance(push, PushChannel) and push.priority == 7
        assert isinstance(feishu, FeishuChannel) and feishu.timeout == 30.0

    def test_invalid_push_length_is_skipped(self, tmp_path):
        settings = Settings(
            output_dir=Path(tmp_path),
            push_url="http://push.local/message",
            push_token="t",
            push_max_length=5,
        )
        assert NotificationDispatcher.from_settings(settings).channels == []
