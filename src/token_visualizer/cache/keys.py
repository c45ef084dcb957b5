"""
缓存键与指纹生成。

缓存键是可读的组合字符串 ``backend:model:text``，大小写与空白敏感；
落盘时只使用键的 SHA-256 指纹，原文不会出现在文件名里。
"""

from __future__ import annotations

import hashlib


def make_cache_key(backend_id: str, model_id: str, text: str) -> str:
    """
    组合缓存键。

    参数:
        backend_id: 后端标识（如 "claude"）
        model_id: 模型标识（如 "claude-3-5-sonnet-20241022"）
        text: 原始输入文本，不做任何归一化

    返回:
        形如 "claude:claude-3-5-sonnet-20241022:Hello" 的键
    """
    return f"{backend_id}:{model_id}:{text}"


def fingerprint(key: str) -> str:
    """返回缓存键的定长指纹（SHA-256 十六进制，64 字符）。"""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()
