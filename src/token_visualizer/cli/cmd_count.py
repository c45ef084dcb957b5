"""
count 命令 — 只输出各模型的 Token 计数。

除渲染格式外还支持 --format json，输出 {"counts": [{"model": 模型标识, "count": 计数}, ...]}，
按请求顺序排列，重复的模型各占一项。
"""

from __future__ import annotations

import json

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

JSON_FORMAT = "json"


def count_command(
    models: list[str] | None = None,
    format: str | None = None,
    no_cache: bool = False,
    encoding: str | None = None,
    claude_model: str | None = None,
    llama_model: str | None = None,
    llama3_tokenizer: str | None = None,
    config_path: str | None = None,
    verbose: bool = False,
) -> None:
    """从 stdin 读取文本，输出每个模型的 Token 数。未指定模型时使用 gpt4。"""
    configure_logging(verbose)
    as_json = format == JSON_FORMAT
    try:
        config = build_config(
            config_path=config_path,
            encoding=encoding,
            claude_model=claude_model,
            llama_model=llama_model,
            llama3_tokenizer=llama3_tokenizer,
            no_cache=no_cache,
            fmt=None if as_json else format,
        )
        model_ids = validate_models(split_models(models) or ["gpt4"])
        text = read_stdin_text()
        visualizer = TokenVisualizer(config)
        if as_json:
            counts = visualizer.count_tokens(text, model_ids)
            payload = {"counts": [{"model": model_id, "count": count} for model_id, count in counts]}
            output = json.dumps(payload, ensure_ascii=False, indent=2)
        else:
            output = visualizer.render_counts(text, model_ids)
    except TokenVisualizerError as e:
        handle_error(e)

    write_output(output)
