"""
CLI 工具函数 — 标准输入读取、配置组装、日志与错误输出。

约定：渲染结果是 stdout 上唯一的内容，错误与日志一律写到 stderr。
"""

from __future__ import annotations

import logging
import sys
from typing import Any, NoReturn

from rich.console import Console
from rich.logging import RichHandler

from token_visualizer.config import VisualizerConfig, load_config
from token_visualizer.errors import InputError, TokenVisualizerError

# 全局 stderr Console 实例
_console: Console | None = None


def create_console() -> Console:
    """创建或获取写入 stderr 的全局 Rich Console。"""
    global _console
    if _console is None:
        _console = Console(stderr=True, highlight=False)
    return _console


def handle_error(error: TokenVisualizerError) -> NoReturn:
    """统一处理 TokenVisualizerError：三段式信息写到 stderr，退出码 1。"""
    console = create_console()
    console.print("[bold red]X 错误[/bold red]")
    console.print(error.full_message, markup=False, soft_wrap=True)
    sys.exit(1)


def write_output(text: str) -> None:
    """把渲染结果原样写到 stdout。"""
    sys.stdout.write(text)
    if text and not text.endswith("\n"):
        sys.stdout.write("\n")
    sys.stdout.flush()


def configure_logging(verbose: bool = False) -> None:
    """
    配置日志输出。

    --verbose 时以 DEBUG 级别输出到 stderr（RichHandler），否则只输出 WARNING 及以上。
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=create_console(), show_path=verbose, rich_tracebacks=verbose)],
        force=True,
    )


def read_stdin_text() -> str:
    """
    从标准输入读取全部文本并去掉首尾空白。

    异常:
        InputError: 输入为空
    """
    try:
        text = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(
            what="无法读取标准输入。",
            why=str(e),
            how="请通过管道传入 UTF-8 文本，例如：echo 'Hello' | token-visualizer visualize",
        ) from e

    text = text.strip()
    if not text:
        raise InputError(
            what="没有可分词的输入文本。",
            why="标准输入为空或只包含空白字符。",
            how="请通过管道传入文本，例如：echo 'Hello, world!' | token-visualizer visualize",
        )
    return text


def split_models(values: list[str] | None) -> list[str]:
    """
    展开 --model 参数：既可重复传入，也可用逗号分隔。

    示例::

        >>> split_models(["gpt4,gpt5", "claude"])
        ['gpt4', 'gpt5', 'claude']
    """
    models: list[str] = []
    for value in values or []:
        models.extend(part.strip() for part in value.split(",") if part.strip())
    return models


def build_config(
    config_path: str | None = None,
    encoding: str | None = None,
    claude_model: str | None = None,
    llama_model: str | None = None,
    llama3_tokenizer: str | None = None,
    no_cache: bool = False,
    fmt: str | None = None,
    show_ids: bool = False,
    show_boundaries: bool = False,
) -> VisualizerConfig:
    """
    根据 CLI 参数组装配置：YAML 文件为底，显式传入的参数覆盖其上。

    未传入的参数不会覆盖配置文件中的值。
    """
    backend: dict[str, Any] = {}
    if encoding:
        backend["encoding"] = encoding
    if claude_model:
        backend["claude_model"] = claude_model
    if llama_model:
        backend["llama_model"] = llama_model
    if llama3_tokenizer:
        backend["llama3_tokenizer"] = llama3_tokenizer

    render: dict[str, Any] = {}
    if fmt:
        render["format"] = fmt
    if show_ids:
        render["show_ids"] = True
    if show_boundaries:
        render["show_boundaries"] = True

    overrides: dict[str, Any] = {}
    if backend:
        overrides["backend"] = backend
    if render:
        overrides["render"] = render
    if no_cache:
        overrides["cache"] = {"enabled": False}

    return load_config(config_path, overrides)
