"""抓取器模块"""
from .tophub import fetch_news

__all__ = ["fetch_news"]
