"""
visualize 命令 — 对单个模型分词并着色输出。
"""

from __future__ import annotations

from token_visualizer.cli.utils import (
    build_config,
    configure_logging,
    handle_error,
    read_stdin_text,
    write_output,
)
from token_visualizer.errors import TokenVisualizerError
from token_visualizer.facade import TokenVisualizer


def visualize_command(
    model: str = "gpt4",
    format: str | None = None,
    show_ids: bool = False,
    show_boundaries: bool = False,
    no_cache: bool = False,
    encoding: str | None = None,
    claude_model: str | None = None,
    llama_model: str | None = None,
    llama3_tokenizer: str | None = None,
    config_path: str | None = None,
    verbose: bool = False,
) -> None:
    """从 stdin 读取文本，用指定模型分词并渲染。"""
    configure_logging(verbose)
    try:
        config = build_config(
            config_path=config_path,
            encoding=encoding,
            claude_model=claude_model,
            llama_model=llama_model,
            llama3_tokenizer=llama3_tokenizer,
            no_cache=no_cache,
            fmt=format,
            show_ids=show_ids,
            show_boundaries=show_boundaries,
        )
        text = read_stdin_text()
        output = TokenVisualizer(config).visualize(text, model=model)
    except TokenVisualizerError as e:
        handle_error(e)

    write_output(output)
