"""
Token Visualizer CLI — 命令行工具入口。

文本一律从 stdin 读取，渲染结果写到 stdout，错误写到 stderr 并以退出码 1 结束。

用法::

    token-visualizer --help
    echo "Hello, world!" | token-visualizer visualize --model gpt5 -i -b
    echo "Hello, world!" | token-visualizer count -m gpt4 -m claude
    cat README.md | token-visualizer compare -m gpt4,gpt5,llama3 --llama3-tokenizer tokenizer.json -f markdown
    token-visualizer models
"""

from __future__ import annotations

import typer

# 创建主应用
app = typer.Typer(
    name="token-visualizer",
    help="Token Visualizer — 可视化并对比不同 LLM 分词器的切分结果",
    add_completion=False,
    no_args_is_help=True,
)

_FORMAT_HELP = "输出格式：terminal / markdown / html / markdown-html（默认取配置，配置缺省为 terminal）"


# ============================================================
# 子命令注册
# ============================================================

@app.command(name="visualize")
def visualize(
    model: str = typer.Option(
        "gpt4",
        "--model",
        "-m",
        help="模型：gpt4, gpt3.5, gpt5, gpt5-mini, gpt5-nano, claude, llama, llama3",
    ),
    format: str | None = typer.Option(None, "--format", "-f", help=_FORMAT_HELP),
    show_ids: bool = typer.Option(False, "--show-ids", "-i", help="显示 Token ID"),
    show_boundaries: bool = typer.Option(False, "--show-boundaries", "-b", help="显示 Token 边界"),
    no_cache: bool = typer.Option(False, "--no-cache", "-n", help="禁用 Claude 计数缓存"),
    encoding: str | None = typer.Option(None, "--encoding", help="gpt4 / gpt3.5 使用的 tiktoken 编码"),
    claude_model: str | None = typer.Option(None, "--claude-model", help="Claude 模型标识"),
    llama_model: str | None = typer.Option(None, "--llama-model", help="LLaMA tokenizer.model 文件路径"),
    llama3_tokenizer: str | None = typer.Option(
        None, "--llama3-tokenizer", help="LLaMA 3 tokenizer.json 文件路径"
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="YAML 配置文件路径（默认自动搜索）"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="详细输出（调试日志写到 stderr）"),
) -> None:
    """对单个模型分词并着色输出。"""
    from token_visualizer.cli.cmd_visualize import visualize_command
    visualize_command(
        model=model,
        format=format,
        show_ids=show_ids,
        show_boundaries=show_boundaries,
        no_cache=no_cache,
        encoding=encoding,
        claude_model=claude_model,
        llama_model=llama_model,
        llama3_tokenizer=llama3_tokenizer,
        config_path=config,
        verbose=verbose,
    )


@app.command(name="count")
def count(
    models: list[str] | None = typer.Option(
        None,
        "--models",
        "--model",
        "-m",
        help="要计数的模型，可重复或用逗号分隔（默认 gpt4）",
    ),
    format: str | None = typer.Option(
        None, "--format", "-f", help=_FORMAT_HELP + "，另支持 json"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", "-n", help="禁用 Claude 计数缓存"),
    encoding: str | None = typer.Option(None, "--encoding", help="gpt4 / gpt3.5 使用的 tiktoken 编码"),
    claude_model: str | None = typer.Option(None, "--claude-model", help="Claude 模型标识"),
    llama_model: str | None = typer.Option(None, "--llama-model", help="LLaMA tokenizer.model 文件路径"),
    llama3_tokenizer: str | None = typer.Option(
        None, "--llama3-tokenizer", help="LLaMA 3 tokenizer.json 文件路径"
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="YAML 配置文件路径（默认自动搜索）"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="详细输出（调试日志写到 stderr）"),
) -> None:
    """只输出各模型的 Token 计数。"""
    from token_visualizer.cli.cmd_count import count_command
    count_command(
        models=models,
        format=format,
        no_cache=no_cache,
        encoding=encoding,
        claude_model=claude_model,
        llama_model=llama_model,
        llama3_tokenizer=llama3_tokenizer,
        config_path=config,
        verbose=verbose,
    )


@app.command(name="compare")
def compare(
    models: list[str] | None = typer.Option(
        None,
        "--models",
        "--model",
        "-m",
        help="要对比的模型，可重复或用逗号分隔（必填）",
    ),
    format: str | None = typer.Option(None, "--format", "-f", help=_FORMAT_HELP),
    show_ids: bool = typer.Option(False, "--show-ids", "-i", help="显示 Token ID"),
    show_boundaries: bool = typer.Option(False, "--show-boundaries", "-b", help="显示 Token 边界"),
    no_cache: bool = typer.Option(False, "--no-cache", "-n", help="禁用 Claude 计数缓存"),
    encoding: str | None = typer.Option(None, "--encoding", help="gpt4 / gpt3.5 使用的 tiktoken 编码"),
    claude_model: str | None = typer.Option(None, "--claude-model", help="Claude 模型标识"),
    llama_model: str | None = typer.Option(None, "--llama-model", help="LLaMA tokenizer.model 文件路径"),
    llama3_tokenizer: str | None = typer.Option(
        None, "--llama3-tokenizer", help="LLaMA 3 tokenizer.json 文件路径"
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="YAML 配置文件路径（默认自动搜索）"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="详细输出（调试日志写到 stderr）"),
) -> None:
    """对比多个模型的分词结果。"""
    from token_visualizer.cli.cmd_compare import compare_command
    compare_command(
        models=models,
        format=format,
        show_ids=show_ids,
        show_boundaries=show_boundaries,
        no_cache=no_cache,
        encoding=encoding,
        claude_model=claude_model,
        llama_model=llama_model,
        llama3_tokenizer=llama3_tokenizer,
        config_path=config,
        verbose=verbose,
    )


@app.command(name="models")
def models() -> None:
    """列出支持的模型标识。"""
    from token_visualizer.cli.cmd_models import models_command
    models_command()


@app.command(name="cache-clear")
def cache_clear(
    directory: str | None = typer.Option(None, "--dir", "-d", help="缓存目录（默认取配置）"),
    config: str | None = typer.Option(None, "--config", "-c", help="YAML 配置文件路径（默认自动搜索）"),
) -> None:
    """清空 Claude 计数的磁盘缓存。"""
    from token_visualizer.cli.cmd_cache import cache_clear_command
    cache_clear_command(directory=directory, config_path=config)


@app.command(name="version")
def version() -> None:
    """显示版本信息。"""
    from token_visualizer import __version__
    typer.echo(f"Token Visualizer v{__version__}")


# ============================================================
# CLI 入口点
# ============================================================

def main() -> None:
    """CLI 入口点。"""
    app()


if __name__ == "__main__":
    main()
