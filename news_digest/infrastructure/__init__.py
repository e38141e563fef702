"""基础设施层：日志、文件存储、调度器、抓取器和通知渠道"""

from .logging import setup_logging
from .scheduler import SchedulerManager
from .storage import DigestStore

__all__ = ["setup_logging", "SchedulerManager", "DigestStore"]
