"""通知渠道模块"""
from .console import ConsoleChannel
from .feishu import Colors, FeishuCardMessage, FeishuChannel, markdown_to_card, news_to_card, summary_to_card
from .push import TRUNCATION_MARKER, PushChannel, truncate_body

__all__ = [
    "ConsoleChannel",
    "Colors",
    "FeishuCardMessage",
    "FeishuChannel",
    "markdown_to_card",
    "news_to_card",
    "summary_to_card",
    "TRUNCATION_MARKER",
    "PushChannel",
    "truncate_body",
]
