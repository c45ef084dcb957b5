"""
Token Visualizer — 可视化并对比不同 LLM 分词器如何切分文本。

支持 OpenAI tiktoken、LLaMA sentencepiece、HuggingFace tokenizer.json
以及 Anthropic 远程计数接口，结果可渲染为终端彩色文本、Markdown 或 HTML。

快速上手::

    from token_visualizer import TokenVisualizer

    visualizer = TokenVisualizer()
    print(visualizer.visualize("Hello, world!", model="gpt4"))

命令行::

    echo "Hello, world!" | token-visualizer compare -m gpt4 -m gpt5 -f markdown
"""

from token_visualizer.cache import DiskCache
from token_visualizer.config import VisualizerConfig, load_config
from token_visualizer.errors import TokenVisualizerError
from token_visualizer.facade import TokenVisualizer
from token_visualizer.models import NO_TOKEN_ID, Token, TokenizationResult
from token_visualizer.render import (
    HtmlRenderer,
    MarkdownRenderer,
    RenderOptions,
    TerminalRenderer,
    get_renderer,
)
from token_visualizer.tokenizer import (
    Backend,
    BackendCapabilities,
    ClaudeBackend,
    HFTokenizerBackend,
    SentencePieceBackend,
    TiktokenBackend,
    create_backend,
    supported_models,
)

__version__ = "0.1.0"

__all__ = [
    # 顶层入口
    "TokenVisualizer",
    # 数据模型
    "NO_TOKEN_ID",
    "Token",
    "TokenizationResult",
    # 后端
    "Backend",
    "BackendCapabilities",
    "ClaudeBackend",
    "HFTokenizerBackend",
    "SentencePieceBackend",
    "TiktokenBackend",
    "create_backend",
    "supported_models",
    # 缓存
    "DiskCache",
    # 渲染
    "HtmlRenderer",
    "MarkdownRenderer",
    "RenderOptions",
    "TerminalRenderer",
    "get_renderer",
    # 配置与异常
    "TokenVisualizerError",
    "VisualizerConfig",
    "load_config",
    "__version__",
]
