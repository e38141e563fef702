"""
每日摘要文件存储

一天一个文件：output/tophub_news_YYYY-MM-DD.md。文件一旦写入就不再覆盖，
同一天再次运行时直接复用。

注意：exists() 和 write() 之间没有加锁，同一天同时启动两个进程可能会竞争；
write() 拒绝覆盖已有文件，后写入的一方会失败。
"""

from datetime import date
from pathlib import Path

from loguru import logger

from ..errors import StoreReadError, StoreWriteError

FILENAME_PREFIX = "tophub_news_"


class DigestStore:
    """按日期存取摘要文件"""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, day: date) -> Path:
        return self.output_dir / f"{FILENAME_PREFIX}{day.isoformat()}.md"

    def exists(self, day: date) -> bool:
        return self.path_for(day).is_file()

    def read(self, day: date) -> str:
        """
        读取指定日期的摘要

        Raises:
            StoreReadError: 文件不存在或读取失败
        """
        path = self.path_for(day)
        if not path.is_file():
            logger.info(f"[新闻存储] 摘要文件不存在: {path.name}")
            raise StoreReadError(f"摘要文件不存在: {path.name}")

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error(f"[新闻存储] 读取摘要文件失败: {path.name}, 错误: {exc}")
            raise StoreReadError(f"读取摘要文件失败: {exc}") from exc

        logger.info(f"[新闻存储] 发现现有文件: {path.name}")
        return content

    def write(self, day: date, content: str, overwrite: bool = False) -> Path:
        """
        写入指定日期的摘要

        默认不覆盖已存在的文件；只有已有文件无法读取、重新抓取后才允许 overwrite。

        Raises:
            StoreWriteError: 文件已存在或写入失败
        """
        path = self.path_for(day)
        try:
            # 不覆盖时用 "x" 模式，文件已存在会抛出 FileExistsError
            with path.open("w" if overwrite else "x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError as exc:
            logger.error(f"[新闻存储] 摘要文件已存在，拒绝覆盖: {path.name}")
            raise StoreWriteError(f"摘要文件已存在: {path.name}") from exc
        except OSError as exc:
            logger.error(f"[新闻存储] 写入摘要文件失败: {path.name}, 错误: {exc}")
            raise StoreWriteError(f"写入摘要文件失败: {exc}") from exc

        logger.info(f"[新闻存储] 新闻数据已保存到: {path.name}")
        return path
