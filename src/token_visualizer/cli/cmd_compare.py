"""
compare 命令 — 多模型分词结果对比。
"""

from __future__ import annotations

from token_visualizer.cli.utils import (
    build_config,
    configure_logging,
    handle_error,
    read_stdin_text,
    split_models,
    write_output,
)
from token_visualizer.errors import TokenVisualizerError
from token_visualizer.facade import TokenVisualizer
from token_visualizer.tokenizer.registry import validate_models


def compare_command(
    models: list[str] | None = None,
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
    """
    从 stdin 读取文本，并排对比多个模型的分词。

    模型列表为空时由注册表报出 UnknownModelError（附可用模型列表）。
    """
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
        model_ids = validate_models(split_models(models))
        text = read_stdin_text()
        output = TokenVisualizer(config).compare(text, model_ids)
    except TokenVisualizerError as e:
        handle_error(e)

    write_output(output)
