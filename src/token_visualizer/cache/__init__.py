"""
Token Visualizer 缓存模块。

提供内容寻址的磁盘缓存，供远程计数后端避免重复调用。
"""

from token_visualizer.cache.disk import (
    CacheLookup,
    DiskCache,
    LookupStatus,
    default_cache_dir,
)
from token_visualizer.cache.keys import fingerprint, make_cache_key
from token_visualizer.cache.lock import RWLock

__all__ = [
    "CacheLookup",
    "DiskCache",
    "LookupStatus",
    "RWLock",
    "default_cache_dir",
    "fingerprint",
    "make_cache_key",
]
