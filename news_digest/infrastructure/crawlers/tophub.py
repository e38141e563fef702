"""今日热榜（tophub.today）按日期抓取节点新闻"""
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger
from pydantic import BaseModel, ValidationError

from ...domain.digest.models import NewsItem
from ...errors import FetchError

TOPHUB_ITEMS_URL = "https://tophub.today/node-items-by-date"

HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Accept-Language": "en,zh-CN;q=0.9,zh;q=0.8,zh-TW;q=0.7",
    "Cache-Control": "no-cache",
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "Origin": "https://tophub.today",
    "Pragma": "no-cache",
    "Referer": "https://tophub.today/n/KqndgapoLl",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
    ),
    "X-Requested-With": "XMLHttpRequest",
}


def _strip_html(value: Any) -> Any:
    """清理标题、描述中的 HTML 标签和实体"""
    if not isinstance(value, str) or ("<" not in value and "&" not in value):
        return value
    return BeautifulSoup(value, "html.parser").get_text().strip()


def _to_news_item(raw: Dict[str, Any]) -> NewsItem:
    cleaned = {key: _strip_html(raw.get(key)) for key in ("title", "description", "extra")}
    return NewsItem.from_raw({**raw, **cleaned})


class NodeItemsData(BaseModel):
    # 没有新闻时上游可能返回 null
    items: Optional[List[Dict[str, Any]]] = None


class NodeItemsResponse(BaseModel):
    status: int
    data: Optional[NodeItemsData] = None


async def fetch_news(
    day: date,
    node_id: str = "345",
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[NewsItem]:
    """
    抓取指定日期某个节点的新闻列表

    Args:
        day: 日期
        node_id: tophub 节点 ID，默认 345（36氪）
        timeout: 请求超时（秒）
        transport: 自定义 httpx transport，测试时使用

    Returns:
        新闻列表（可能为空）

    Raises:
        FetchError: 网络错误、HTTP 错误或返回数据格式错误
    """
    form = {"p": "1", "date": day.isoformat(), "nodeid": node_id}

    logger.info(f"[新闻抓取] 正在获取新闻数据，日期: {day.isoformat()}, 节点: {node_id}")
    try:
        async with httpx.AsyncClient(timeout=timeout, headers=HEADERS, transport=transport) as client:
            resp = await client.post(TOPHUB_ITEMS_URL, data=form)
            resp.raise_for_status()
            payload = resp.json()
    except httpx.HTTPError as exc:
        logger.error(f"[新闻抓取] 获取新闻数据失败: {exc}")
        raise FetchError(f"获取新闻数据失败: {exc}") from exc
    except ValueError as exc:
        logger.error(f"[新闻抓取] 响应不是合法的 JSON: {exc}")
        raise FetchError("API返回数据格式错误") from exc

    try:
        parsed = NodeItemsResponse.model_validate(payload)
    except ValidationError as exc:
        logger.error(f"[新闻抓取] 响应结构不符合预期: {exc}")
        raise FetchError("API返回数据格式错误") from exc

    if parsed.status != 200 or parsed.data is None:
        logger.error(f"[新闻抓取] API 返回异常状态: {parsed.status}")
        raise FetchError("API返回数据格式错误")

    items = [_to_news_item(raw) for raw in parsed.data.items or []]
    logger.info(f"[新闻抓取] 成功获取 {len(items)} 条新闻")
    return items
