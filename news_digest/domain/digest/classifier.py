"""新闻关键词分类"""

from typing import List, Sequence

from .models import CategorizedDigest, CategoryRule, NewsItem


def order_rules(rules: Sequence[CategoryRule]) -> List[CategoryRule]:
    """
    Return rules with catch-all categories moved to the end.

    具体分类保持原有顺序，兜底分类（如「其他新闻」）始终最后参与匹配。
    """
    specific = [rule for rule in rules if not rule.catch_all]
    fallback = [rule for rule in rules if rule.catch_all]
    return specific + fallback


def classify(items: Sequence[NewsItem], rules: Sequence[CategoryRule]) -> CategorizedDigest:
    """
    按规则把新闻分到各个分类。

    - 关键词匹配：小写后的「标题 + 描述」包含任一关键词即命中
    - 分类不互斥：一条新闻可以出现在多个分类里，兜底分类总是包含全部新闻
    - 每个分类都会出现在结果里，没有命中的分类对应空列表

    Args:
        items: 抓取到的新闻，顺序即展示顺序
        rules: 分类规则

    Returns:
        分类名 -> 新闻列表
    """
    digest: CategorizedDigest = {}
    for rule in order_rules(rules):
        digest[rule.name] = [item for item in items if rule.matches(item)]
    return digest
