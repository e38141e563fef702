"""
飞书自定义机器人消息卡片

卡片结构文档: https://open.feishu.cn/document/uAjLw4CM/ukzMukzMukzM/feishu-cards/card-json-structure
卡片搭建工具: https://open.feishu.cn/cardkit
"""
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from loguru import logger

from ...domain.digest.card_fields import markdown_to_fields, markdown_to_plain
from ...domain.digest.models import NewsItem, PreviewItem
from ...errors import ChannelConfigError, ChannelSendError


class Colors:
    """卡片标题颜色模板"""

    BLUE = "blue"
    WATHET = "wathet"
    TURQUOISE = "turquoise"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    CARMINE = "carmine"
    VIOLET = "violet"
    GREY = "grey"
    DEFAULT = "default"


EMOJIS = [
    "👍", "👏", "👌", "👊", "✌", "👋", "👆", "👉", "👓", "👔",
    "👕", "👟", "👣", "👥", "👦", "👧", "👮", "👻", "👼", "👽",
    "👾", "💁", "💃", "💄", "💈", "💊", "💌", "💍", "💎", "💐",
    "💓", "💕", "💖", "💗", "💘", "💙", "💚", "💛", "💜", "💝",
    "💞", "💠", "💡", "💢", "💥", "💦", "💧", "💨", "💪", "💫",
]

NEWS_NOTE = "点击标题查看详情"
NEWS_LIST_HEADING = "**今日要闻**："
SUMMARY_NOTE = "新闻推送"
SUMMARY_MAX_TITLES = 5


def text_element(content: str) -> Dict[str, Any]:
    return {"tag": "plain_text", "content": content}


def markdown_element(content: str, align: str = "left") -> Dict[str, Any]:
    return {"tag": "markdown", "text_align": align, "content": content}


def note_element(content: str) -> Dict[str, Any]:
    return {"tag": "note", "elements": [text_element(content)]}


def linked_markdown(title: str, url: str) -> str:
    return f"[{title}]({url})"


def fields_to_markdown(fields: Mapping[str, str]) -> str:
    return "".join(f"{key}：{value}\n" for key, value in fields.items())


def news_to_markdown(items: Sequence[PreviewItem]) -> str:
    """新闻列表 -> 带链接的编号列表"""
    if not items:
        return ""
    lines = [NEWS_LIST_HEADING]
    for idx, item in enumerate(items, start=1):
        lines.append(f"{idx}. {linked_markdown(item.title or '无标题', item.url or '#')}")
    return "\n".join(lines) + "\n"


@dataclass
class FeishuCardMessage:
    """一张飞书消息卡片：标题 + Markdown 内容 + 备注"""

    title: str
    content: str = ""
    note: str = ""
    note_emoji: bool = True
    link: str = ""
    header_color: str = Colors.BLUE
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def build_note(self) -> str:
        note = self.note or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        if self.note_emoji:
            emoji = self.rng.choice(EMOJIS)
            note = f"{emoji} {note} {emoji}"
        return note

    def to_payload(self) -> Dict[str, Any]:
        elements: List[Dict[str, Any]] = []
        if self.content:
            elements.append(markdown_element(self.content))
        elements.append(note_element(self.build_note()))

        card: Dict[str, Any] = {
            "elements": elements,
            "header": {
                "title": text_element(self.title),
                "template": self.header_color,
            },
        }
        if self.link:
            card["card_link"] = {"url": self.link}
        return {"msg_type": "interactive", "card": card}

    def to_text_payload(self) -> Dict[str, Any]:
        """卡片发送失败时的纯文本版本"""
        body = markdown_to_plain(self.content) if self.content else ""
        text = f"{self.title}\n{body}".strip()
        return {"msg_type": "text", "content": {"text": text}}


def markdown_to_card(title: str, markdown: str, **options: Any) -> FeishuCardMessage:
    """Markdown 文本转换成字段形式的卡片"""
    options.setdefault("header_color", Colors.BLUE)
    return FeishuCardMessage(title=title, content=fields_to_markdown(markdown_to_fields(markdown)), **options)


def news_to_card(title: str, items: Sequence[PreviewItem], **options: Any) -> FeishuCardMessage:
    """新闻列表转换成带链接的卡片"""
    options.setdefault("header_color", Colors.BLUE)
    options["note"] = options.get("note") or NEWS_NOTE
    return FeishuCardMessage(title=title, content=news_to_markdown(items), **options)


def summary_to_card(
    title: str,
    items: Sequence[NewsItem],
    updated_at: Optional[datetime] = None,
    source: str = "36氪",
    **options: Any,
) -> FeishuCardMessage:
    """
    只含统计信息的简要卡片：总数、更新时间、来源和前几条标题

    超过 SUMMARY_MAX_TITLES 条时追加一行提示剩余数量。
    """
    fields: Dict[str, str] = {
        "总新闻数": f"{len(items)} 条",
        "更新时间": (updated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S"),
        "数据来源": source,
    }
    for idx, item in enumerate(items[:SUMMARY_MAX_TITLES], start=1):
        fields[f"新闻{idx}"] = item.title or "无标题"
    if len(items) > SUMMARY_MAX_TITLES:
        fields["提示"] = f"... 还有 {len(items) - SUMMARY_MAX_TITLES} 条新闻"

    options.setdefault("header_color", Colors.BLUE)
    options["note"] = options.get("note") or SUMMARY_NOTE
    return FeishuCardMessage(title=title, content=fields_to_markdown(fields), **options)


class FeishuChannel:
    """飞书卡片推送，卡片失败时降级为纯文本消息"""

    name = "feishu"

    def __init__(
        self,
        webhook: str,
        timeout: float = 30.0,
        note_emoji: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not webhook:
            raise ChannelConfigError("FEISHU_WEBHOOK / FS_KEY not set")
        self.webhook = webhook
        self.timeout = timeout
        self.note_emoji = note_emoji
        self._transport = transport

    async def _post(self, payload: Dict[str, Any]) -> None:
        """
        发送一条消息

        Raises:
            ChannelSendError: 网络错误、响应无法解析或 code 不为 0
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.webhook, json=payload)
                data = resp.json()
        except httpx.HTTPError as exc:
            raise ChannelSendError(f"飞书请求失败: {exc}") from exc
        except ValueError as exc:
            raise ChannelSendError(f"飞书响应解析失败: {exc}") from exc

        if not isinstance(data, dict) or data.get("code") != 0:
            raise ChannelSendError(f"飞书消息发送失败: {data}")

    async def send_card(self, message: FeishuCardMessage) -> bool:
        try:
            await self._post(message.to_payload())
            logger.info("[新闻推送] 飞书卡片发送成功")
            return True
        except ChannelSendError as exc:
            logger.warning(f"[新闻推送] {exc}，降级为纯文本消息")

        try:
            await self._post(message.to_text_payload())
        except ChannelSendError as exc:
            logger.error(f"[新闻推送] {exc}")
            return False
        logger.info("[新闻推送] 飞书纯文本消息发送成功")
        return True

    async def send_markdown(self, title: str, body: str, alert: bool = False) -> bool:
        color = Colors.RED if alert else Colors.BLUE
        card = markdown_to_card(title, body, note_emoji=self.note_emoji, header_color=color)
        return await self.send_card(card)

    async def send_news(self, title: str, items: Sequence[PreviewItem]) -> bool:
        card = news_to_card(title, items, note_emoji=self.note_emoji)
        return await self.send_card(card)
