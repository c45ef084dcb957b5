"""
Token Visualizer 渲染模块。

支持的输出格式：
- terminal: Rich 渲染的 ANSI 彩色文本
- markdown: GFM Markdown 表格
- html: 直接生成的着色 HTML
- markdown-html: Markdown 经 markdown-it-py 转换得到的 HTML
"""

from __future__ import annotations

from token_visualizer.config.defaults import OUTPUT_FORMATS
from token_visualizer.errors import UnknownFormatError
from token_visualizer.render.base import (
    BOUNDARY_MARKER,
    TOKEN_PALETTE,
    PaletteColor,
    Renderer,
    RenderOptions,
    palette_color,
    palette_index,
)
from token_visualizer.render.html import HtmlRenderer, MarkdownHtmlConverter
from token_visualizer.render.markdown import MarkdownRenderer
from token_visualizer.render.terminal import TerminalRenderer


def get_renderer(
    fmt: str,
    options: RenderOptions | None = None,
    width: int = 120,
) -> Renderer:
    """
    按格式名构造渲染器。

    异常:
        UnknownFormatError: 不支持的格式
    """
    options = options or RenderOptions()
    if fmt == "terminal":
        return TerminalRenderer(options, width=width)
    if fmt == "markdown":
        return MarkdownRenderer(options)
    if fmt == "html":
        return HtmlRenderer(options)
    if fmt == "markdown-html":
        return HtmlRenderer(options, from_markdown=True)
    raise UnknownFormatError(
        what=f"不支持的输出格式 '{fmt}'。",
        why="格式名不在支持的集合中。",
        how=f"可选格式：{', '.join(OUTPUT_FORMATS)}。",
        format_name=fmt,
    )


__all__ = [
    "BOUNDARY_MARKER",
    "TOKEN_PALETTE",
    "HtmlRenderer",
    "MarkdownHtmlConverter",
    "MarkdownRenderer",
    "PaletteColor",
    "RenderOptions",
    "Renderer",
    "TerminalRenderer",
    "get_renderer",
    "palette_color",
    "palette_index",
]
