"""
HTML 渲染器 — 输出自包含的 HTML 文档（内联 <style>，无外部资源）。

两种模式：
- 直接模式：每个 Token 渲染为带 token-{i % 8} 类名的 <span>
- Markdown 模式（from_markdown=True）：先用 MarkdownRenderer 生成 Markdown，
  再由 MarkdownHtmlConverter 转成 HTML 片段，嵌入同一个文档外壳
"""

from __future__ import annotations

import html
import logging
from collections.abc import Sequence

from markdown_it import MarkdownIt

from token_visualizer.errors import RenderError
from token_visualizer.models import TokenizationResult
from token_visualizer.render.base import (
    BOUNDARY_MARKER,
    TOKEN_PALETTE,
    RenderOptions,
    palette_index,
)
from token_visualizer.render.markdown import MarkdownRenderer

logger = logging.getLogger(__name__)

_TOKEN_CSS = "\n".join(
    f".token-{i} {{ color: {color.hex}; }}" for i, color in enumerate(TOKEN_PALETTE)
)

BASE_CSS = f"""body {{ background: #1e1e2e; color: #cdd6f4; font-family: -apple-system, "Segoe UI", sans-serif; margin: 2em; }}
h1, h2, h3 {{ color: #f5f5f5; }}
.tokens, pre {{ font-family: "JetBrains Mono", Menlo, Consolas, monospace; white-space: pre-wrap; word-break: break-all; background: #11111b; padding: 1em; border-radius: 6px; }}
.token {{ font-weight: bold; }}
.token-id {{ color: #7f849c; font-size: 0.75em; }}
.boundary {{ color: #585b70; }}
.stats {{ font-weight: bold; }}
.note {{ color: #7f849c; font-style: italic; }}
table {{ border-collapse: collapse; margin: 1em 0; }}
th, td {{ border: 1px solid #45475a; padding: 0.25em 0.75em; text-align: left; }}
code {{ font-family: "JetBrains Mono", Menlo, Consolas, monospace; }}
{_TOKEN_CSS}"""

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
{css}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def html_document(body: str, title: str = "Token Visualizer") -> str:
    """把 HTML 片段包进自包含文档。"""
    return _DOCUMENT_TEMPLATE.format(title=html.escape(title), css=BASE_CSS, body=body.rstrip("\n"))


class MarkdownHtmlConverter:
    """
    Markdown → HTML 片段转换器（CommonMark + GFM 表格，禁用原始 HTML）。

    禁用原始 HTML 后，Token 文本中的 <script> 之类内容会被转义而不是执行。
    """

    def __init__(self) -> None:
        self._parser = MarkdownIt("commonmark", {"html": False}).enable("table")

    def convert(self, markdown_text: str) -> str:
        try:
            return self._parser.render(markdown_text)
        except Exception as e:
            logger.error("Markdown 转换失败：%s", e)
            raise RenderError(
                what="无法把 Markdown 转换为 HTML。",
                why=str(e),
                how="请改用 --format markdown 或 --format html 输出。",
            ) from e


class HtmlRenderer:
    """
    HTML 格式渲染器。

    用法::

        renderer = HtmlRenderer(RenderOptions(show_boundaries=True))
        Path("tokens.html").write_text(renderer.render_single(result), encoding="utf-8")
    """

    def __init__(
        self,
        options: RenderOptions | None = None,
        from_markdown: bool = False,
        converter: MarkdownHtmlConverter | None = None,
    ) -> None:
        self._options = options or RenderOptions()
        self._from_markdown = from_markdown
        self._markdown = MarkdownRenderer(self._options) if from_markdown else None
        self._converter = (converter or MarkdownHtmlConverter()) if from_markdown else None

    @property
    def options(self) -> RenderOptions:
        return self._options

    def render_single(self, result: TokenizationResult) -> str:
        if self._markdown is not None:
            return self._via_markdown(self._markdown.render_single(result), result.model_label)
        return html_document(self._result_section(result, level=1), title=result.model_label)

    def render_comparison(self, results: Sequence[TokenizationResult]) -> str:
        if not results:
            return ""
        if len(results) == 1:
            return self.render_single(results[0])
        if self._markdown is not None:
            return self._via_markdown(self._markdown.render_comparison(results), "Token Comparison")

        parts = ["<h1>Token Comparison</h1>", "<h2>Token Counts</h2>", _count_table(results)]
        parts.extend(self._result_section(result, level=2) for result in results)
        return html_document("\n".join(parts), title="Token Comparison")

    def render_count_only(self, results: Sequence[TokenizationResult]) -> str:
        if self._markdown is not None:
            return self._via_markdown(self._markdown.render_count_only(results), "Token Counts")
        body = "\n".join(["<h1>Token Counts</h1>", _count_table(results)])
        return html_document(body, title="Token Counts")

    def token_spans(self, result: TokenizationResult) -> str:
        """构建 Token 流：每个 Token 一个着色 <span>，可选 ID 与边界标记。"""
        parts: list[str] = []
        last = len(result.tokens) - 1
        for i, token in enumerate(result.tokens):
            parts.append(
                f'<span class="token token-{palette_index(i)}">{html.escape(token.text)}</span>'
            )
            if self._options.show_ids and token.has_id:
                parts.append(f'<sup class="token-id">{token.id}</sup>')
            if self._options.show_boundaries and i < last:
                parts.append(f'<span class="boundary">{BOUNDARY_MARKER}</span>')
        return "".join(parts)

    # ============================================================
    # 内部方法
    # ============================================================

    def _result_section(self, result: TokenizationResult, level: int) -> str:
        label = html.escape(result.model_label)
        lines = [
            '<section class="result">',
            f"<h{level}>{label}</h{level}>",
            f'<p class="stats">Total tokens: {result.total_count}</p>',
        ]
        if result.is_count_only:
            lines.append('<p class="note">Count only: this backend does not expose individual tokens.</p>')
        lines.append(f'<div class="tokens">{self.token_spans(result)}</div>')
        lines.append("</section>")
        return "\n".join(lines)

    def _via_markdown(self, markdown_text: str, title: str) -> str:
        assert self._converter is not None
        return html_document(self._converter.convert(markdown_text), title=title)


def _count_table(results: Sequence[TokenizationResult]) -> str:
    rows = "\n".join(
        f"<tr><td>{html.escape(result.model_label)}</td><td>{result.total_count}</td></tr>"
        for result in results
    )
    return (
        "<table>\n<thead><tr><th>Model</th><th>Tokens</th></tr></thead>\n"
        f"<tbody>\n{rows}\n</tbody>\n</table>"
    )
