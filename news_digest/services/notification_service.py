"""通知分发服务"""

import asyncio
from typing import Dict, List, Optional, Sequence, Union

from loguru import logger

from ..config_loader import Settings
from ..domain.digest.models import PreviewItem
from ..errors import ChannelConfigError, ChannelSendError
from ..infrastructure.notifiers import ConsoleChannel, FeishuChannel, PushChannel

NotificationContent = Union[str, Sequence[PreviewItem]]


class NotificationDispatcher:
    """
    把一条通知发送到所有已配置的渠道。

    - 渠道之间互不影响：某个渠道失败只记录日志，不影响其他渠道，也不会抛出异常
    - 没有任何已配置渠道，或所有渠道都失败时，输出到控制台
    """

    def __init__(self, channels: Sequence, fallback: Optional[ConsoleChannel] = None):
        self.channels = list(channels)
        self.fallback = fallback or ConsoleChannel()

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationDispatcher":
        """根据配置创建渠道，未配置的渠道直接跳过"""
        channels: List = []

        try:
            channels.append(
                PushChannel(
                    url=settings.push_url,
                    token=settings.push_token,
                    priority=settings.push_priority,
                    markdown=settings.push_markdown,
                    timeout=settings.push_timeout,
                    max_length=settings.push_max_length,
                )
            )
        except ChannelConfigError as exc:
            logger.debug(f"[新闻推送] 跳过通用推送: {exc}")
        except ValueError as exc:
            logger.error(f"[新闻推送] 通用推送配置错误，已跳过: {exc}")

        try:
            channels.append(
                FeishuChannel(
                    webhook=settings.feishu_webhook,
                    timeout=settings.feishu_timeout,
                    note_emoji=settings.feishu_note_emoji,
                )
            )
        except ChannelConfigError as exc:
            logger.debug(f"[新闻推送] 跳过飞书推送: {exc}")

        if not channels:
            logger.info("[新闻推送] 未配置任何推送渠道，通知将输出到控制台")
        return cls(channels)

    @property
    def channel_names(self) -> List[str]:
        return [channel.name for channel in self.channels]

    async def _send(self, channel, title: str, content: NotificationContent, alert: bool) -> bool:
        try:
            if isinstance(content, str):
                return await channel.send_markdown(title, content, alert=alert)
            return await channel.send_news(title, content)
        except ChannelSendError as exc:
            logger.error(f"[新闻推送] 渠道 {channel.name} 发送失败: {exc}")
            return False
        except Exception as exc:  # noqa: BLE001
            logger.error(f"[新闻推送] 渠道 {channel.name} 发送异常: {exc}")
            return False

    async def dispatch(
        self,
        title: str,
        content: NotificationContent,
        alert: bool = False,
    ) -> Dict[str, bool]:
        """
        发送通知

        Args:
            title: 通知标题
            content: Markdown 文本，或者新闻列表（标题 + 链接）
            alert: 是否为错误通知（飞书卡片标红，通用推送提高优先级）

        Returns:
            渠道名 -> 是否发送成功
        """
        outcome: Dict[str, bool] = {}

        if self.channels:
            results = await asyncio.gather(
                *(self._send(channel, title, content, alert) for channel in self.channels)
            )
            outcome = dict(zip(self.channel_names, results))
            if any(results):
                return outcome
            logger.warning("[新闻推送] 所有推送渠道均发送失败，输出到控制台")

        outcome[self.fallback.name] = await self._send(self.fallback, title, content, alert)
        return outcome
