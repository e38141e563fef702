import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from .domain.digest.models import CategoryRule
from .domain.digest.render import DEFAULT_SOURCE_NAME


def _project_root() -> Path:
    # news_digest/config_loader.py -> project_root
    return Path(__file__).resolve().parents[1]


FEISHU_HOOK_BASE = "https://open.feishu.cn/open-apis/bot/v2/hook/"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """
    运行配置，启动时从环境变量（以及 .env 文件）解析一次。

    推送渠道是否启用完全取决于地址/凭证是否配置：
    - 通用推送：PUSH_URL + PUSH_TOKEN
    - 飞书卡片：FEISHU_WEBHOOK 或 FS_KEY
    """

    output_dir: Path
    node_id: str = "345"
    source_name: str = DEFAULT_SOURCE_NAME
    categorize: bool = True
    preview_count: int = 20
    fetch_timeout: float = 10.0
    timezone: str = "Asia/Shanghai"
    cron: Optional[str] = None

    push_url: str = ""
    push_token: str = ""
    push_priority: int = 5
    push_markdown: bool = True
    push_timeout: float = 10.0
    push_max_length: int = 4000

    feishu_webhook: str = ""
    feishu_timeout: float = 30.0
    feishu_note_emoji: bool = True

    @property
    def push_enabled(self) -> bool:
        return bool(self.push_url and self.push_token)

    @property
    def feishu_enabled(self) -> bool:
        return bool(self.feishu_webhook)


def _get_str(name: str, fallback: str = "") -> str:
    raw = os.getenv(name)
    if raw is None:
        return fallback
    return raw.strip().strip('"').strip("'")


def _get_int(name: str, fallback: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return fallback
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for {name}={raw!r}, fallback to {fallback}.")
        return fallback


def _get_float(name: str, fallback: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return fallback
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for {name}={raw!r}, fallback to {fallback}.")
        return fallback


def _get_bool(name: str, fallback: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return fallback
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid value for {name}={raw!r}, fallback to {fallback}.")
    return fallback


def _feishu_webhook_from_env() -> str:
    webhook = _get_str("FEISHU_WEBHOOK")
    if webhook:
        return webhook
    key = _get_str("FS_KEY")
    if key:
        return f"{FEISHU_HOOK_BASE}{key}"
    return ""


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Resolve runtime settings from environment variables.

    .env 中的值不会覆盖已经存在的环境变量。
    """
    try:
        load_dotenv(env_file or _project_root() / ".env")
    except Exception as exc:  # noqa: BLE001
        logger.warning(f"Failed to load .env file: {exc}. Continuing with environment variables...")

    output_dir = _get_str("NEWS_OUTPUT_DIR")
    cron = _get_str("NEWS_CRON") or None

    settings = Settings(
        output_dir=Path(output_dir) if output_dir else _project_root() / "output",
        node_id=_get_str("NEWS_NODE_ID", "345") or "345",
        source_name=_get_str("NEWS_SOURCE_NAME", DEFAULT_SOURCE_NAME) or DEFAULT_SOURCE_NAME,
        categorize=_get_bool("NEWS_CATEGORIZE", True),
        preview_count=_get_int("NEWS_PREVIEW_COUNT", 20),
        fetch_timeout=_get_float("NEWS_FETCH_TIMEOUT", 10.0),
        timezone=_get_str("NEWS_TIMEZONE", "Asia/Shanghai") or "Asia/Shanghai",
        cron=cron,
        push_url=_get_str("PUSH_URL"),
        push_token=_get_str("PUSH_TOKEN"),
        push_priority=_get_int("PUSH_PRIORITY", 5),
        push_markdown=_get_bool("PUSH_MARKDOWN", True),
        push_timeout=_get_float("PUSH_TIMEOUT", 10.0),
        push_max_length=_get_int("PUSH_MAX_LENGTH", 4000),
        feishu_webhook=_feishu_webhook_from_env(),
        feishu_timeout=_get_float("FEISHU_TIMEOUT", 30.0),
        feishu_note_emoji=_get_bool("FEISHU_NOTE_EMOJI", True),
    )

    logger.info(
        f"配置已加载: 分类={'开启' if settings.categorize else '关闭'}, "
        f"通用推送={'已配置' if settings.push_enabled else '未配置'}, "
        f"飞书={'已配置' if settings.feishu_enabled else '未配置'}"
    )
    return settings


DEFAULT_CATEGORY_RULES: List[CategoryRule] = [
    CategoryRule(
        name="科技与互联网",
        keywords=(
            "AI", "人工智能", "大模型", "芯片", "半导体", "互联网", "科技", "手机",
            "苹果", "华为", "小米", "机器人", "算法", "软件", "云计算", "OpenAI",
        ),
    ),
    CategoryRule(
        name="经济与政策",
        keywords=(
            "央行", "降准", "降息", "利率", "经济", "GDP", "政策", "财政", "税",
            "关税", "监管", "证监会", "股市", "A股", "融资", "上市", "IPO", "美联储",
        ),
    ),
    CategoryRule(
        name="汽车与出行",
        keywords=("汽车", "新能源", "电动车", "车企", "特斯拉", "比亚迪", "自动驾驶", "航空", "高铁"),
    ),
    CategoryRule(
        name="消费与生活",
        keywords=("消费", "零售", "电商", "餐饮", "奶茶", "咖啡", "旅游", "房价", "楼市", "双十一"),
    ),
    CategoryRule(
        name="国际与社会",
        keywords=("美国", "日本", "欧洲", "俄罗斯", "国际", "外交", "社会", "教育", "医疗", "疫情"),
    ),
    CategoryRule(name="其他新闻", catch_all=True),
]


def _categories_path() -> Path:
    return _project_root() / "config" / "categories.json"


def load_category_rules(path: Optional[Path] = None) -> List[CategoryRule]:
    """
    Load category rules from config/categories.json.

    文件格式：
    [
      {"name": "经济与政策", "keywords": ["央行", "降准"]},
      {"name": "其他新闻", "catch_all": true}
    ]

    文件不存在或格式错误时使用内置的默认分类。
    """
    path = path or _categories_path()
    if not path.exists():
        logger.debug(f"Category config not found at {path}, using defaults.")
        return list(DEFAULT_CATEGORY_RULES)

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError("category file must be a JSON array")

        rules: List[CategoryRule] = []
        seen = set()
        for entry in data:
            if not isinstance(entry, dict):
                raise ValueError(f"category entry must be an object: {entry!r}")
            name = str(entry.get("name", "")).strip()
            if not name:
                raise ValueError(f"category entry without name: {entry!r}")
            if name in seen:
                logger.warning(f"Duplicate category {name!r} ignored.")
                continue
            seen.add(name)

            keywords = entry.get("keywords", [])
            if not isinstance(keywords, list):
                raise ValueError(f"keywords of {name!r} must be a list")
            rules.append(
                CategoryRule(
                    name=name,
                    keywords=tuple(str(k).strip() for k in keywords if str(k).strip()),
                    catch_all=bool(entry.get("catch_all", False)),
                )
            )
    except Exception as exc:  # noqa: BLE001
        logger.error(f"Failed to load category config: {exc}, using defaults.")
        return list(DEFAULT_CATEGORY_RULES)

    if not any(rule.catch_all for rule in rules):
        logger.warning("Category config has no catch-all category, items without a match will not be listed.")

    return rules
