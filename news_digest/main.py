"""命令行入口：抓取今日新闻、生成摘要并推送"""

import argparse
import asyncio
import functools
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo

from loguru import logger

from .config_loader import Settings, load_category_rules, load_settings
from .infrastructure import DigestStore, SchedulerManager, setup_logging
from .infrastructure.crawlers import fetch_news
from .services import DigestPipeline, NotificationDispatcher

JOB_ID = "daily_news_digest"


def build_pipeline(settings: Settings) -> DigestPipeline:
    """按配置组装流程，通知渠道在这里创建一次"""
    tz = ZoneInfo(settings.timezone)
    return DigestPipeline(
        store=DigestStore(settings.output_dir),
        dispatcher=NotificationDispatcher.from_settings(settings),
        fetch_news=functools.partial(fetch_news, node_id=settings.node_id, timeout=settings.fetch_timeout),
        rules=load_category_rules(),
        categorize=settings.categorize,
        preview_count=settings.preview_count,
        source_name=settings.source_name,
        clock=lambda: datetime.now(tz),
    )


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="news-digest", description="每日新闻抓取、分类与推送")
    parser.add_argument("--env-file", type=Path, default=None, help=".env 文件路径")
    parser.add_argument("--cron", default=None, help="常驻运行并按 cron 表达式定时执行，例如 \"0 8 * * *\"")
    parser.add_argument("--no-categorize", action="store_true", help="不分类，直接列出全部新闻")
    parser.add_argument("--logs-dir", type=Path, default=None, help="日志目录")
    return parser.parse_args(argv)


async def _run_scheduled(pipeline: DigestPipeline, settings: Settings, cron: str) -> None:
    manager = SchedulerManager(timezone=settings.timezone)
    manager.create_scheduler()
    manager.add_cron_job(pipeline.run, cron=cron, job_id=JOB_ID)
    manager.start()
    try:
        # 常驻运行，直到进程被终止
        await asyncio.Event().wait()
    finally:
        manager.shutdown(wait=False)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(args.logs_dir)

    settings = load_settings(args.env_file)
    if args.no_categorize:
        settings.categorize = False

    pipeline = build_pipeline(settings)

    cron = args.cron or settings.cron
    if cron:
        logger.info(f"[调度器] 常驻模式，cron: {cron!r}")
        try:
            asyncio.run(_run_scheduled(pipeline, settings, cron))
        except KeyboardInterrupt:
            logger.info("[调度器] 收到退出信号，停止运行")
        return 0

    return asyncio.run(pipeline.run())


if __name__ == "__main__":
    sys.exit(main())
