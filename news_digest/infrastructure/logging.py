"""日志配置模块"""

from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(logs_dir: Optional[Path] = None) -> Path:
    """
    配置日志系统，将日志保存到文件

    Args:
        logs_dir: 日志目录，默认是项目根目录下的 logs/

    Returns:
        实际使用的日志目录
    """
    if logs_dir is None:
        project_root = Path(__file__).resolve().parent.parent.parent
        logs_dir = project_root / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    # 主日志文件（所有日志），按日期轮转，保留30天，压缩旧日志
    logger.add(
        logs_dir / "news_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="30 days",
        compression="zip",
        encoding="utf-8",
        level="INFO",
        format=LOG_FORMAT,
    )

    # 错误日志文件（只记录 ERROR 及以上级别），保留更久
    logger.add(
        logs_dir / "error_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="90 days",
        compression="zip",
        encoding="utf-8",
        level="ERROR",
        format=LOG_FORMAT,
    )

    logger.info(f"日志系统已配置，日志文件保存在 {logs_dir}")
    return logs_dir
