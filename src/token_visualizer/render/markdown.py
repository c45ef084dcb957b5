"""
Markdown 渲染器 — 输出 GitHub 风格（GFM）Markdown。

每个 Token 占表格一行，颜色用色块字符表示（第 i 行使用 TOKEN_PALETTE[i % 8]）。
Token 文本放在行内代码中，并对表格语法敏感的字符转义：
    |  → \\|
    换行 → \\n
    回车 → \\r

行内代码的反引号围栏总比文本中最长的连续反引号多一个，
因此任意 Token 文本都不会提前闭合代码段。
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from token_visualizer.models import TokenizationResult
from token_visualizer.render.base import (
    BOUNDARY_MARKER,
    RenderOptions,
    palette_color,
)

_BACKTICK_RUN = re.compile(r"`+")


def escape_cell(text: str) -> str:
    """转义表格单元格中的管道符、换行和回车。"""
    return text.replace("|", "\\|").replace("\n", "\\n").replace("\r", "\\r")


def code_span(text: str) -> str:
    """
    把文本包成行内代码。

    示例::

        >>> code_span("Hello")
        '`Hello`'
        >>> code_span("a`b")
        '``a`b``'
        >>> code_span("`x")
        '`` `x ``'
    """
    if not text:
        return ""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    fence = "`" * (longest + 1)
    padded = text.startswith("`") or text.endswith("`") or (
        text.startswith(" ") and text.endswith(" ") and text.strip(" ") != ""
    )
    if padded:
        text = f" {text} "
    return f"{fence}{text}{fence}"


def code_block(text: str) -> str:
    """把文本包成围栏代码块，围栏长度至少为 3。"""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}\n{text}\n{fence}"


class MarkdownRenderer:
    """
    Markdown 格式渲染器。

    用法::

        renderer = MarkdownRenderer(RenderOptions(show_ids=True))
        print(renderer.render_single(result))
    """

    def __init__(self, options: RenderOptions | None = None) -> None:
        self._options = options or RenderOptions()

    @property
    def options(self) -> RenderOptions:
        return self._options

    def render_single(self, result: TokenizationResult) -> str:
        return "\n\n".join(self._result_section(result, level=1)) + "\n"

    def render_comparison(self, results: Sequence[TokenizationResult]) -> str:
        if not results:
            return ""
        if len(results) == 1:
            return self.render_single(results[0])

        blocks = ["# Token Comparison", "## Token Counts", self._count_table(results)]
        for result in results:
            blocks.extend(self._result_section(result, level=2))
        return "\n\n".join(blocks) + "\n"

    def render_count_only(self, results: Sequence[TokenizationResult]) -> str:
        return "\n\n".join(["# Token Counts", self._count_table(results)]) + "\n"

    # ============================================================
    # 表格与分节
    # ============================================================

    def token_table(self, result: TokenizationResult) -> str:
        """
        构建 Token 表格：表头 + 分隔行 + 每个 Token 一行。

        N 个 Token 的表格恰好有 N + 2 行。
        """
        show_ids = self._options.show_ids and result.has_token_ids
        header = "| # | Color | Text |"
        separator = "|---|---|---|"
        if show_ids:
            header += " ID |"
            separator += "---|"

        lines = [header, separator]
        for i, token in enumerate(result.tokens):
            row = f"| {i} | {palette_color(i).swatch} | {code_span(escape_cell(token.text))} |"
            if show_ids:
                row += f" {token.id if token.has_id else ''} |"
            lines.append(row)
        return "\n".join(lines)

    def boundary_block(self, result: TokenizationResult) -> str:
        """用边界标记拼接 Token 文本，放在代码块中原样展示。"""
        return code_block(BOUNDARY_MARKER.join(token.text for token in result.tokens))

    def _result_section(self, result: TokenizationResult, level: int) -> list[str]:
        heading = "#" * level
        sub = "#" * (level + 1)
        blocks = [f"{heading} {result.model_label}", f"**Total tokens:** {result.total_count}"]

        if result.is_count_only:
            blocks.append("_Count only: this backend does not expose individual tokens._")
            blocks.extend([f"{sub} Text", code_block(result.source_text)])
            return blocks

        blocks.extend([f"{sub} Tokens", self.token_table(result)])
        if self._options.show_boundaries:
            blocks.extend([f"{sub} Boundaries", self.boundary_block(result)])
        return blocks

    @staticmethod
    def _count_table(results: Sequence[TokenizationResult]) -> str:
        lines = ["| Model | Tokens |", "|---|---|"]
        for result in results:
            lines.append(f"| {escape_cell(result.model_label)} | {result.total_count} |")
        return "\n".join(lines)
