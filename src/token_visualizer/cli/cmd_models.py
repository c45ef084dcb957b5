"""
models 命令 — 列出支持的模型标识。
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from token_visualizer.config.defaults import MODEL_SPECS


def models_command() -> None:
    """以表格形式输出所有模型标识、后端类型和说明。"""
    table = Table(title="Supported Models", show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan")
    table.add_column("Backend", style="green")
    table.add_column("Description")

    for model_id, spec in MODEL_SPECS.items():
        table.add_row(model_id, spec.backend, spec.description)

    Console(highlight=False).print(table)
