"""服务层：业务流程编排"""

from .digest_service import DigestPipeline, ERROR_TITLE, digest_title
from .notification_service import NotificationDispatcher

__all__ = ["DigestPipeline", "ERROR_TITLE", "digest_title", "NotificationDispatcher"]
