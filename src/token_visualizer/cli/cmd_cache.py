"""
cache-clear 命令 — 清空远程计数的磁盘缓存。
"""

from __future__ import annotations

from token_visualizer.cache import DiskCache
from token_visualizer.cli.utils import build_config, create_console, handle_error
from token_visualizer.errors import TokenVisualizerError


def cache_clear_command(
    directory: str | None = None,
    config_path: str | None = None,
) -> None:
    """删除缓存目录；目录不存在时视为成功。"""
    try:
        config = build_config(config_path=config_path)
        cache = DiskCache(directory or config.cache.directory)
        cache.clear()
    except TokenVisualizerError as e:
        handle_error(e)

    create_console().print(f"[bold green]OK[/bold green] 已清空缓存：{cache.directory}")
