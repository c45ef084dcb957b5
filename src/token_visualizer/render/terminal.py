"""
终端渲染器 — 基于 Rich 输出带 ANSI 颜色的文本。

Console 写入内存中的 StringIO，强制启用 256 色，因此输出与当前终端无关，
可以直接写到 stdout 或在测试中断言。
"""

from __future__ import annotations

import io
from collections.abc import Sequence

from rich.color import Color
from rich.console import Console, Group
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from token_visualizer.models import TokenizationResult
from token_visualizer.render.base import (
    BOUNDARY_MARKER,
    TOKEN_PALETTE,
    RenderOptions,
    palette_index,
)

TOKEN_STYLES: tuple[Style, ...] = tuple(
    Style(color=Color.from_ansi(color.ansi), bold=True) for color in TOKEN_PALETTE
)
_ID_STYLE = Style(dim=True)
_BOUNDARY_STYLE = Style(color=Color.from_ansi(244))
_COUNT_STYLE = Style(bold=True)

COMPARISON_PANEL_WIDTH = 50


class TerminalRenderer:
    """
    终端格式渲染器。

    用法::

        renderer = TerminalRenderer(RenderOptions(show_ids=True))
        sys.stdout.write(renderer.render_single(result))
    """

    def __init__(self, options: RenderOptions | None = None, width: int = 120) -> None:
        self._options = options or RenderOptions()
        self._width = width

    @property
    def options(self) -> RenderOptions:
        return self._options

    def build_token_text(self, result: TokenizationResult) -> Text:
        """
        构建着色的 Token 流。

        每个 Token 依次追加：文本 → ID（可选）→ 边界标记（非末尾 Token）。
        """
        text = Text()
        last = len(result.tokens) - 1
        for i, token in enumerate(result.tokens):
            text.append(token.text, style=TOKEN_STYLES[palette_index(i)])
            if self._options.show_ids and token.has_id:
                text.append(f"[{token.id}]", style=_ID_STYLE)
            if self._options.show_boundaries and i < last:
                text.append(BOUNDARY_MARKER, style=_BOUNDARY_STYLE)
        return text

    def render_single(self, result: TokenizationResult) -> str:
        console = self._console(self._width)
        console.print(self._result_panel(result))
        return _output(console)

    def render_comparison(self, results: Sequence[TokenizationResult]) -> str:
        if not results:
            return ""
        if len(results) == 1:
            return self.render_single(results[0])

        grid = Table.grid(padding=(0, 1))
        for _ in results:
            grid.add_column(width=COMPARISON_PANEL_WIDTH)
        grid.add_row(*(self._result_panel(result, width=COMPARISON_PANEL_WIDTH) for result in results))

        console = self._console(len(results) * (COMPARISON_PANEL_WIDTH + 2))
        console.print(grid)
        return _output(console)

    def render_count_only(self, results: Sequence[TokenizationResult]) -> str:
        console = self._console(self._width)
        console.print(Text("📊 Token Counts", style=_COUNT_STYLE))
        for i, result in enumerate(results):
            line = Text()
            line.append(result.model_label, style=TOKEN_STYLES[palette_index(i)])
            line.append(f": {result.total_count} tokens")
            console.print(line)
        return _output(console)

    # ============================================================
    # 内部方法
    # ============================================================

    def _result_panel(self, result: TokenizationResult, width: int | None = None) -> Panel:
        stats = Text(f"Total tokens: {result.total_count}", style=_COUNT_STYLE)
        if result.is_count_only:
            stats.append("  (count only)", style=_ID_STYLE)
        body = Group(stats, Text(), self.build_token_text(result))
        return Panel(
            body,
            title=Text(f"🔤 {result.model_label}"),
            title_align="left",
            width=width,
        )

    @staticmethod
    def _console(width: int) -> Console:
        return Console(
            file=io.StringIO(),
            force_terminal=True,
            color_system="256",
            width=width,
            highlight=False,
            emoji=False,
            no_color=False,
            legacy_windows=False,
        )


def _output(console: Console) -> str:
    file = console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue()
