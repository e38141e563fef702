"""领域层：新闻分类与摘要"""
