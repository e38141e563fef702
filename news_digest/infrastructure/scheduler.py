"""常驻模式下的 cron 调度"""

from typing import Any, Awaitable, Callable, Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

# 进程休眠或卡顿导致错过触发时间后，1 小时内仍补跑一次
MISFIRE_GRACE_SECONDS = 3600


class SchedulerManager:
    """包装 AsyncIOScheduler，每个任务 ID 只保留一个 cron 任务"""

    def __init__(self, timezone: str = "Asia/Shanghai"):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.timezone = timezone

    def create_scheduler(self) -> AsyncIOScheduler:
        if self.running:
            logger.warning("[调度器] 旧的调度器仍在运行，先将其关闭")
            self.shutdown(wait=False)

        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        logger.info(f"[调度器] 已创建调度器，时区: {self.timezone}")
        return self.scheduler

    def _require_scheduler(self) -> AsyncIOScheduler:
        if self.scheduler is None:
            raise RuntimeError("调度器未初始化，请先调用 create_scheduler()")
        return self.scheduler

    def add_cron_job(
        self,
        func: Callable[..., Awaitable[Any]],
        cron: str,
        job_id: str,
        **kwargs: Any,
    ) -> Job:
        """
        按 cron 表达式注册任务，同 ID 的旧任务会被替换

        Args:
            func: 协程函数，例如 DigestPipeline.run
            cron: 5 字段 cron 表达式（分 时 日 月 周），按调度器时区解释
            job_id: 任务 ID
            **kwargs: 透传给 add_job

        Raises:
            ValueError: cron 表达式不合法
        """
        scheduler = self._require_scheduler()
        trigger = CronTrigger.from_crontab(cron.strip(), timezone=self.timezone)

        kwargs.setdefault("coalesce", True)
        kwargs.setdefault("max_instances", 1)
        kwargs.setdefault("misfire_grace_time", MISFIRE_GRACE_SECONDS)
        job = scheduler.add_job(func, trigger=trigger, id=job_id, replace_existing=True, **kwargs)
        logger.info(f"[调度器] 已注册任务 {job_id}，cron: {cron!r}")
        return job

    def start(self) -> None:
        scheduler = self._require_scheduler()
        scheduler.start()
        for job in scheduler.get_jobs():
            logger.info(f"[调度器] {job.id} 下次执行: {getattr(job, 'next_run_time', None) or '待计算'}")

    def shutdown(self, wait: bool = True) -> None:
        if self.scheduler is None:
            return
        try:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=wait)
                logger.info("[调度器] 已停止")
        except Exception as e:  # noqa: BLE001
            logger.error(f"[调度器] 停止调度器出错: {e}")
        finally:
            self.scheduler = None

    def get_job(self, job_id: str) -> Optional[Job]:
        if self.scheduler is None:
            return None
        return self.scheduler.get_job(job_id)

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running
