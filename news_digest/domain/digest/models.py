from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    # 标题、描述等都渲染在同一行里，内部换行和连续空白合并成一个空格
    text = " ".join(str(value).split())
    return text or None


@dataclass(frozen=True)
class NewsItem:
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    extra: Optional[str] = None  # 热度 / 来源等附加信息
    time: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "NewsItem":
        """Build an item from an upstream record, ignoring unknown keys."""
        return cls(
            title=_clean(raw.get("title")),
            url=_clean(raw.get("url")),
            description=_clean(raw.get("description")),
            extra=_clean(raw.get("extra")),
            time=_clean(raw.get("time")),
        )

    @property
    def match_text(self) -> str:
        """分类匹配使用的文本：标题 + 描述，小写"""
        return f"{self.title or ''}{self.description or ''}".lower()


@dataclass(frozen=True)
class CategoryRule:
    name: str
    keywords: Tuple[str, ...] = ()
    catch_all: bool = False  # 兜底分类，匹配所有新闻

    def matches(self, item: NewsItem) -> bool:
        if self.catch_all:
            return True
        text = item.match_text
        return any(keyword.lower() in text for keyword in self.keywords if keyword)


# 分类名 -> 该分类下的新闻（保持规则顺序和抓取顺序）
CategorizedDigest = Dict[str, List[NewsItem]]


@dataclass(frozen=True)
class PreviewItem:
    title: str
    url: str


@dataclass(frozen=True)
class DigestArtifact:
    date: date
    markdown: str
    item_count: int = 0
