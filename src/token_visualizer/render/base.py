"""
渲染层公共定义：调色板、渲染选项与 Renderer 协议。

三种输出格式（终端 / Markdown / HTML）共享同一套语义：
- 第 i 个 Token 使用调色板第 i % 8 种颜色
- 边界标记只出现在相邻 Token 之间
- 仅当 show_ids 且 Token 携带 ID 时才显示 ID
- render_comparison 对空列表返回 ""，对单个结果等价于 render_single
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from token_visualizer.models import TokenizationResult

BOUNDARY_MARKER = "|"


@dataclass(frozen=True)
class PaletteColor:
    """
    调色板中的一种颜色。

    属性:
        name: 颜色名称
        ansi: xterm-256 色号（终端渲染用）
        hex: 十六进制颜色（HTML 渲染用）
        swatch: 色块字符（Markdown 渲染用）
    """

    name: str
    ansi: int
    hex: str
    swatch: str


TOKEN_PALETTE: tuple[PaletteColor, ...] = (
    PaletteColor("pink", 205, "#ff5faf", "🟥"),
    PaletteColor("purple", 141, "#af87ff", "🟪"),
    PaletteColor("cyan", 87, "#5fffff", "🟦"),
    PaletteColor("yellow", 228, "#ffff87", "🟨"),
    PaletteColor("green", 118, "#87ff00", "🟩"),
    PaletteColor("magenta", 213, "#ff87ff", "🟣"),
    PaletteColor("light-blue", 117, "#87d7ff", "🔵"),
    PaletteColor("peach", 223, "#ffd7af", "🟧"),
)


def palette_index(position: int) -> int:
    """第 position 个 Token 对应的调色板下标。"""
    return position % len(TOKEN_PALETTE)


def palette_color(position: int) -> PaletteColor:
    return TOKEN_PALETTE[palette_index(position)]


@dataclass(frozen=True)
class RenderOptions:
    """渲染选项，构造后不可变。"""

    show_ids: bool = False
    show_boundaries: bool = False


@runtime_checkable
class Renderer(Protocol):
    """所有输出格式实现的渲染协议。"""

    def render_single(self, result: TokenizationResult) -> str:
        """渲染单个模型的分词结果。"""
        ...

    def render_comparison(self, results: Sequence[TokenizationResult]) -> str:
        """并排 / 分节渲染多个模型的分词结果。"""
        ...

    def render_count_only(self, results: Sequence[TokenizationResult]) -> str:
        """只渲染各模型的 Token 计数。"""
        ...
