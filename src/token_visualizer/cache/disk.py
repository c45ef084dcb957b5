"""
DiskCache — 基于内容寻址的磁盘缓存。

专门为 Claude 计数 API 服务：同一 (后端, 模型, 文本) 只调用一次远程接口。

存储布局::

    ~/.cache/token-visualizer/
        <sha256(key)>.json     # 值的 JSON 序列化

语义：
- 条目在首次未命中后创建，之后每次相同查询都会读取
- 永不自动过期，只能通过 clear() 整体删除
- 单条读写失败（I/O 错误、内容损坏）一律降级为未命中，只记日志

并发：进程内读写锁（多读单写）。跨进程并发写同一条目可能竞争，
但缓存值是键的纯函数，最后写入者写下的值与先前的相同。
"""

from __future__ import annotations

import enum
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from token_visualizer.cache.keys import fingerprint
from token_visualizer.cache.lock import RWLock
from token_visualizer.errors import CacheError

logger = logging.getLogger(__name__)


def default_cache_dir() -> Path:
    """默认缓存目录：~/.cache/token-visualizer。"""
    return Path.home() / ".cache" / "token-visualizer"


class LookupStatus(str, enum.Enum):
    """缓存查询结果类型。"""

    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


@dataclass(frozen=True)
class CacheLookup:
    """
    一次缓存查询的结果。

    属性:
        status: 命中 / 未命中 / 读取失败
        value: 命中时的值，其余情况为 None
        error: 读取失败时的原因描述
    """

    status: LookupStatus
    value: Any = None
    error: str = ""

    @property
    def hit(self) -> bool:
        return self.status is LookupStatus.HIT


class DiskCache:
    """
    磁盘缓存。

    用法::

        cache = DiskCache()  # 默认 ~/.cache/token-visualizer
        cache.put("claude:claude-3-5-sonnet-20241022:Hello", 8)

        lookup = cache.lookup("claude:claude-3-5-sonnet-20241022:Hello")
        if lookup.hit:
            print(lookup.value)

        cache.clear()

    属性:
        directory: 缓存目录
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        """
        初始化 DiskCache，并确保缓存目录存在。

        参数:
            directory: 缓存目录。None 时使用 default_cache_dir()。

        异常:
            CacheError: 目录无法创建
        """
        self._directory = Path(directory) if directory is not None else default_cache_dir()
        self._lock = RWLock()
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(
                what=f"无法创建缓存目录 '{self._directory}'。",
                why=str(e),
                how="检查目录权限，或使用 --no-cache 禁用缓存。",
                details={"directory": str(self._directory)},
            ) from e

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """返回缓存键对应的文件路径（只由指纹决定）。"""
        return self._directory / f"{fingerprint(key)}.json"

    def lookup(self, key: str) -> CacheLookup:
        """
        查询缓存，区分命中、未命中与读取失败。

        读取失败不会抛异常；调用方应把 ERROR 当作未命中处理。
        """
        path = self.path_for(key)
        with self._lock.read():
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return CacheLookup(status=LookupStatus.MISS)
            except OSError as e:
                logger.warning("读取缓存文件 %s 失败，按未命中处理：%s", path.name, e)
                return CacheLookup(status=LookupStatus.ERROR, error=str(e))

        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("缓存文件 %s 内容损坏，按未命中处理：%s", path.name, e)
            return CacheLookup(status=LookupStatus.ERROR, error=str(e))

        logger.debug("缓存命中：%s", path.name)
        return CacheLookup(status=LookupStatus.HIT, value=value)

    def get(self, key: str, default: Any = None) -> Any:
        """命中时返回缓存值，未命中或读取失败时返回 default。"""
        lookup = self.lookup(key)
        return lookup.value if lookup.hit else default

    def put(self, key: str, value: Any) -> bool:
        """
        写入缓存。

        先写临时文件再原子替换，读者不会看到写了一半的文件。

        参数:
            key: 缓存键
            value: 可 JSON 序列化的值

        返回:
            是否写入成功。失败只记日志，不抛异常。
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("缓存值无法序列化，跳过写入：%s", e)
            return False

        path = self.path_for(key)
        with self._lock.write():
            tmp_name = ""
            try:
                self._directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._directory, prefix=".tmp-", suffix=".json"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except OSError as e:
                logger.warning("写入缓存文件 %s 失败：%s", path.name, e)
                if tmp_name:
                    Path(tmp_name).unlink(missing_ok=True)
                return False
        return True

    def clear(self) -> None:
        """删除整个缓存目录。对空缓存重复调用是安全的。"""
        with self._lock.write():
            try:
                shutil.rmtree(self._directory)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise CacheError(
                    what=f"清空缓存目录 '{self._directory}' 失败。",
                    why=str(e),
                    how="检查目录权限，或手动删除该目录。",
                    details={"directory": str(self._directory)},
                ) from e
        logger.info("已清空缓存目录：%s", self._directory)

    def __contains__(self, key: str) -> bool:
        return self.lookup(key).hit
