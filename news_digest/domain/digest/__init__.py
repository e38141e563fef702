"""摘要领域模型"""
from .models import CategorizedDigest, CategoryRule, DigestArtifact, NewsItem, PreviewItem
from .classifier import classify, order_rules
from .render import (
    extract_preview_items,
    extract_total_count,
    render_digest,
    render_flat_digest,
    render_preview,
)
from .card_fields import markdown_to_fields, markdown_to_plain

__all__ = [
    "CategorizedDigest",
    "CategoryRule",
    "DigestArtifact",
    "NewsItem",
    "PreviewItem",
    "classify",
    "order_rules",
    "extract_preview_items",
    "extract_total_count",
    "render_digest",
    "render_flat_digest",
    "render_preview",
    "markdown_to_fields",
    "markdown_to_plain",
]
