"""每日新闻抓取、分类与推送"""

__version__ = "1.0.0"
