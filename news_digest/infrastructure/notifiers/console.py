"""控制台通知：没有可用的远程渠道时输出到日志"""
from typing import Sequence

from loguru import logger

from ...domain.digest.models import PreviewItem
from ...domain.digest.render import render_preview


class ConsoleChannel:
    name = "console"

    async def send_markdown(self, title: str, body: str, alert: bool = False) -> bool:
        log = logger.warning if alert else logger.info
        log("=== 通知 ===")
        log(f"标题: {title}")
        log(f"内容: {body}")
        log("============")
        return True

    async def send_news(self, title: str, items: Sequence[PreviewItem]) -> bool:
        return await self.send_markdown(title, render_preview(items))
