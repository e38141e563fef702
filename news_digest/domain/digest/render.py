import re
from datetime import datetime
from typing import List, Optional, Sequence

from .models import CategorizedDigest, NewsItem, PreviewItem

DEFAULT_SOURCE_NAME = "36氪 <https://tophub.today>"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

STATS_HEADING = "统计信息"
UNTITLED = "无标题"

_LIST_LINK_RE = re.compile(r"^- \[(.*?)\]\((.*?)\)")
_TOTAL_COUNT_RE = re.compile(r"总新闻数量:\s*(\d+)")


def format_time(moment: datetime) -> str:
    return moment.strftime(TIME_FORMAT)


def _one_line(value: Optional[str]) -> str:
    return " ".join(value.split()) if value else ""


def format_item_line(item: NewsItem) -> str:
    """
    单条新闻渲染为 Markdown 列表项，保证只占一行：

        - [标题](链接) - 描述 | 附加信息 | 时间: xx
    """
    title = _one_line(item.title) or UNTITLED
    url = _one_line(item.url) or "#"
    description = _one_line(item.description)
    extra = _one_line(item.extra)
    time = _one_line(item.time)
    suffix = (f" | {extra}" if extra else "") + (f" | 时间: {time}" if time else "")
    return f"- [{title}]({url}) - {description}{suffix}"


def _header_lines(generated_at: datetime) -> List[str]:
    return [
        f"# {generated_at:%Y-%m-%d} 新闻列表",
        "",
        f"更新时间: {format_time(generated_at)}",
        "",
    ]


def _stats_lines(total_count: int, generated_at: datetime, source: str) -> List[str]:
    return [
        f"## {STATS_HEADING}",
        "",
        f"- 总新闻数量: {total_count} 条",
        f"- 数据来源: {source}",
        f"- 生成时间: {format_time(generated_at)}",
    ]


def render_digest(
    digest: CategorizedDigest,
    total_count: int,
    generated_at: datetime,
    source: str = DEFAULT_SOURCE_NAME,
) -> str:
    """
    Render a categorized digest to the daily markdown document.

    没有新闻的分类不输出标题；分类顺序即规则顺序。
    """
    lines = _header_lines(generated_at)

    for category, items in digest.items():
        if not items:
            continue
        lines.append(f"## {category}")
        lines.append("")
        lines.extend(format_item_line(item) for item in items)
        lines.append("")

    lines.extend(_stats_lines(total_count, generated_at, source))
    return "\n".join(lines) + "\n"


def render_flat_digest(
    items: Sequence[NewsItem],
    generated_at: datetime,
    source: str = DEFAULT_SOURCE_NAME,
) -> str:
    """不分类时直接列出全部新闻"""
    lines = _header_lines(generated_at)
    lines.extend(format_item_line(item) for item in items)
    lines.append("")
    lines.extend(_stats_lines(len(items), generated_at, source))
    return "\n".join(lines) + "\n"


def extract_preview_items(markdown: str, max_items: int = 20) -> List[PreviewItem]:
    """
    从摘要文件内容中提取前 N 条新闻的标题和链接。

    分类可能重叠（兜底分类包含全部新闻），相同的 标题+链接 只保留第一次出现。
    """
    items: List[PreviewItem] = []
    seen = set()
    if max_items <= 0:
        return items

    for line in markdown.splitlines():
        match = _LIST_LINK_RE.match(line)
        if not match:
            continue
        key = (match.group(1), match.group(2))
        if key in seen:
            continue
        seen.add(key)
        items.append(PreviewItem(title=match.group(1), url=match.group(2)))
        if len(items) >= max_items:
            break

    return items


def render_preview(items: Sequence[PreviewItem]) -> str:
    """生成简化通知内容，只包含标题和链接"""
    lines = [f"{idx}. [{item.title}]({item.url})" for idx, item in enumerate(items, start=1)]
    lines.append("")
    lines.append("---")
    return "\n".join(lines) + "\n"


def extract_total_count(markdown: str) -> int:
    """从摘要文件的统计信息中读取总新闻数量，找不到时返回 0"""
    match = _TOTAL_COUNT_RE.search(markdown)
    return int(match.group(1)) if match else 0
