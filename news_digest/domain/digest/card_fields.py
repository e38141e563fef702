"""
Markdown -> 卡片字段 转换

尽力而为的逐行转换，不是完整的 Markdown 解析器：
- 跳过空行、标题行（# 开头）、分割线（--- / *** / ___）和「统计信息」标题
- 列表行（- / * / • / 1.）去掉列表符号，作为「项目N」字段
- 其他包含冒号（优先全角「：」）的行拆成 键：值
- 键和值都会去掉 **、# 和 [文本](链接) 中的链接部分
"""

import re
from typing import Dict

from .render import STATS_HEADING

_LINK_RE = re.compile(r"\[(.*?)\]\(.*?\)")
_LIST_MARKER_RE = re.compile(r"^(?:[-•*]\s+|\d+\.\s*)")
_HEADING_MARK_RE = re.compile(r"#+\s*")
_URL_LINK_RE = re.compile(r"\[(.*?)\]\((.*?)\)")
_LEADING_HEADING_RE = re.compile(r"^#+\s*", re.MULTILINE)
_RULE_PREFIXES = ("---", "***", "___")


def strip_inline_markdown(text: str) -> str:
    """去掉粗体标记和链接语法，只保留链接文本"""
    text = _LINK_RE.sub(r"\1", text)
    return text.replace("**", "").strip()


def markdown_to_plain(text: str) -> str:
    """纯文本版本：[标题](链接) -> 标题 (链接)，去掉标题符号和粗体"""
    text = _URL_LINK_RE.sub(lambda m: f"{m.group(1)} ({m.group(2)})" if m.group(2) else m.group(1), text)
    text = _LEADING_HEADING_RE.sub("", text)
    return text.replace("**", "")


def _split_key_value(text: str):
    separator = "：" if "：" in text else ":"
    key, _, value = text.partition(separator)
    return key, value


def markdown_to_fields(markdown: str) -> Dict[str, str]:
    """
    Convert a markdown body into ordered card fields.

    Args:
        markdown: Markdown 文本

    Returns:
        字段名 -> 字段值，保持行顺序
    """
    fields: Dict[str, str] = {}

    for raw_line in markdown.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("#"):
            continue
        if line.startswith(_RULE_PREFIXES):
            continue
        if STATS_HEADING in line:
            continue

        if _LIST_MARKER_RE.match(line):
            content = strip_inline_markdown(_LIST_MARKER_RE.sub("", line, count=1))
            if content:
                fields[f"项目{len(fields) + 1}"] = content
            continue

        # 链接地址里的冒号（http:）不算分隔符
        plain = _LINK_RE.sub(r"\1", line)
        if "：" not in plain and ":" not in plain:
            continue

        key, value = _split_key_value(plain)
        clean_key = strip_inline_markdown(_HEADING_MARK_RE.sub("", key))
        clean_value = strip_inline_markdown(value)
        if clean_key and clean_value:
            fields[clean_key] = clean_value

    return fields
