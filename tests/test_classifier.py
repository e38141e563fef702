"""新闻分类测试"""
import pytest

from news_digest.config_loader import DEFAULT_CATEGORY_RULES
from news_digest.domain.digest import CategoryRule, NewsItem, classify, order_rules


def _item(title, description="", url="http://example.com"):
    return NewsItem(title=title, url=url, description=description)


class TestClassify:
    """分类测试类"""

    @pytest.fixture
    def items(self):
        return [
            _item("央行降准", url="http://a"),
            _item("某车企发布新能源车型", url="http://b"),
            _item("一条普通新闻", description="没有关键词", url="http://c"),
            _item("大模型创业公司完成融资", url="http://d"),
        ]

    def test_central_bank_item_lands_in_policy_and_catch_all(self):
        """央行降准只命中经济与政策和其他新闻"""
        item = NewsItem(title="央行降准", description="", url="http://a")

        digest = classify([item], DEFAULT_CATEGORY_RULES)

        assert list(digest.keys()) == [rule.name for rule in DEFAULT_CATEGORY_RULES]
        assert digest["经济与政策"] == [item]
        assert digest["其他新闻"] == [item]
        for name, bucket in digest.items():
            if name not in ("经济与政策", "其他新闻"):
                assert bucket == []

    def test_classify_is_deterministic(self, items):
        """相同输入两次分类结果一致"""
        assert classify(items, DEFAULT_CATEGORY_RULES) == classify(items, DEFAULT_CATEGORY_RULES)

    def test_buckets_preserve_source_order(self, items):
        """每个分类都是原列表的有序子序列"""
        digest = classify(items, DEFAULT_CATEGORY_RULES)
        for bucket in digest.values():
            positions = [items.index(item) for item in bucket]
            assert positions == sorted(positions)

    def test_catch_all_contains_every_item(self, items):
        """兜底分类等于全部新闻"""
        digest = classify(items, DEFAULT_CATEGORY_RULES)
        assert digest["其他新闻"] == items

    def test_categories_are_not_exclusive(self, items):
        """分类不互斥，总数可以超过新闻数量"""
        digest = classify(items, DEFAULT_CATEGORY_RULES)
        total = sum(len(bucket) for bucket in digest.values())
        assert total > len(items)
        # 融资新闻同时属于科技和经济
        assert items[3] in digest["科技与互联网"]
        assert items[3] in digest["经济与政策"]

    def test_empty_items_yield_all_empty_buckets(self):
        """没有新闻时每个分类都是空列表"""
        digest = classify([], DEFAULT_CATEGORY_RULES)
        assert set(digest.keys()) == {rule.name for rule in DEFAULT_CATEGORY_RULES}
        assert all(bucket == [] for bucket in digest.values())

    def test_keyword_match_is_case_insensitive(self):
        """关键词匹配忽略大小写，描述也参与匹配"""
        rules = [CategoryRule(name="AI", keywords=("OpenAI",))]
        hit_title = _item("openai 发布新模型")
        hit_description = _item("新模型", description="来自 OPENAI")
        miss = _item("其他")

        digest = classify([hit_title, hit_description, miss], rules)

        assert digest["AI"] == [hit_title, hit_description]

    def test_input_is_not_mutated(self, items):
        """分类不修改输入"""
        snapshot = list(items)
        classify(items, DEFAULT_CATEGORY_RULES)
        assert items == snapshot

    def test_catch_all_is_evaluated_last(self):
        """兜底分类即使写在前面也排到最后"""
        rules = [
            CategoryRule(name="其他新闻", catch_all=True),
            CategoryRule(name="经济", keywords=("央行",)),
        ]
        digest = classify([_item("央行")], rules)
        assert list(digest.keys()) == ["经济", "其他新闻"]
        assert [rule.name for rule in order_rules(rules)] == ["经济", "其他新闻"]


class TestNewsItem:
    """新闻数据模型测试"""

    def test_from_raw_coerces_and_drops_empty_values(self):
        item = NewsItem.from_raw({"title": " 标题 ", "url": "", "extra": 123, "unknown": "x"})
        assert item.title == "标题"
        assert item.url is None
        assert item.extra == "123"
        assert item.description is None

    def test_from_raw_collapses_internal_whitespace(self):
        item = NewsItem.from_raw({"title": "第一行\n第二行", "description": "a \t\r\n b"})
        assert item.title == "第一行 第二行"
        assert item.description == "a b"
