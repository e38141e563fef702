"""每日新闻摘要服务"""

from datetime import date, datetime
from typing import Awaitable, Callable, List, Optional, Sequence

from loguru import logger

from ..domain.digest.classifier import classify
from ..domain.digest.models import CategoryRule, DigestArtifact, NewsItem
from ..domain.digest.render import (
    DEFAULT_SOURCE_NAME,
    extract_preview_items,
    extract_total_count,
    format_time,
    render_digest,
    render_flat_digest,
)
from ..errors import DigestError, FetchError, NoDataError, StoreReadError
from ..infrastructure.storage import DigestStore
from .notification_service import NotificationDispatcher

FetchNews = Callable[[date], Awaitable[Sequence[NewsItem]]]

ERROR_TITLE = "❌ 新闻爬取失败"


def digest_title(day: date) -> str:
    return f"📰 今日新闻 - {day.isoformat()}"


class DigestPipeline:
    """
    每日新闻摘要流程：

        检查今日文件 -> 复用 / (抓取 -> 分类 -> 渲染 -> 保存) -> 推送

    - 今日文件已存在：直接读取并推送简化通知，不再抓取，也不会重写文件
    - 读取已有文件失败：降级为重新抓取
    - 抓取失败、没有数据或保存失败：发送错误通知，返回退出码 1
    - 推送失败只记录日志，不影响退出码
    """

    def __init__(
        self,
        store: DigestStore,
        dispatcher: NotificationDispatcher,
        fetch_news: FetchNews,
        rules: Sequence[CategoryRule],
        categorize: bool = True,
        preview_count: int = 20,
        source_name: str = DEFAULT_SOURCE_NAME,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.fetch_news = fetch_news
        self.rules = list(rules)
        self.categorize = categorize
        self.preview_count = preview_count
        self.source_name = source_name
        self._clock = clock

    async def run(self) -> int:
        """
        执行一次完整流程

        Returns:
            进程退出码：0 成功（包括复用已有文件），1 失败
        """
        now = self._clock()
        today = now.date()
        logger.info(f"[新闻抓取] 开始执行每日新闻任务，时间: {format_time(now)}")

        try:
            existing = self.store.exists(today)
            artifact = self._load_existing(today) if existing else None
            if artifact is None:
                # 已有文件无法读取时，重新抓取的结果替换它
                artifact = await self._generate(today, now, overwrite=existing)
        except DigestError as exc:
            logger.error(f"[新闻抓取] 脚本执行失败: {exc}")
            await self._notify_failure(exc)
            return 1
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"[新闻抓取] 脚本执行出现未预期的错误: {exc}")
            await self._notify_failure(exc)
            return 1

        await self._notify(artifact)
        logger.info(f"[新闻抓取] 任务完成，今日新闻 {artifact.item_count} 条")
        return 0

    def _load_existing(self, today: date) -> Optional[DigestArtifact]:
        logger.info(f"[新闻抓取] 今日新闻文件已存在: {self.store.path_for(today).name}")
        try:
            markdown = self.store.read(today)
        except StoreReadError as exc:
            logger.warning(f"[新闻抓取] 使用现有文件失败（{exc}），继续执行抓取...")
            return None

        return DigestArtifact(
            date=today,
            markdown=markdown,
            item_count=extract_total_count(markdown),
        )

    async def _fetch(self, today: date) -> List[NewsItem]:
        try:
            items = list(await self.fetch_news(today))
        except FetchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise FetchError(f"获取新闻数据失败: {exc}") from exc

        if not items:
            raise NoDataError("未获取到新闻数据")
        logger.info(f"[新闻抓取] 成功获取 {len(items)} 条新闻")
        return items

    async def _generate(self, today: date, now: datetime, overwrite: bool = False) -> DigestArtifact:
        items = await self._fetch(today)

        if self.categorize:
            digest = classify(items, self.rules)
            summary = ", ".join(f"{name} {len(bucket)}" for name, bucket in digest.items())
            logger.info(f"[新闻抓取] 分类结果: {summary}")
            markdown = render_digest(digest, len(items), now, source=self.source_name)
        else:
            markdown = render_flat_digest(items, now, source=self.source_name)

        self.store.write(today, markdown, overwrite=overwrite)
        return DigestArtifact(date=today, markdown=markdown, item_count=len(items))

    async def _notify(self, artifact: DigestArtifact) -> None:
        title = digest_title(artifact.date)
        preview = extract_preview_items(artifact.markdown, self.preview_count)
        logger.info(f"[新闻推送] 发送简化通知（{len(preview)} 条新闻）")

        if preview:
            outcome = await self.dispatcher.dispatch(title, preview)
        else:
            outcome = await self.dispatcher.dispatch(title, artifact.markdown)
        logger.info(f"[新闻推送] 推送结果: {outcome}")

    async def _notify_failure(self, exc: BaseException) -> None:
        body = f"错误信息: {exc}\n时间: {format_time(self._clock())}"
        outcome = await self.dispatcher.dispatch(ERROR_TITLE, body, alert=True)
        logger.info(f"[新闻推送] 错误通知推送结果: {outcome}")
