"""
Backend 协议定义。

同一段文本在 GPT-4o、Claude、LLaMA 中会被切成完全不同的 Token。
可视化工具要把它们并排展示，就需要一个统一的能力契约：
无论背后是本地 BPE 引擎还是远程计数 API，调用方式都相同。

契约要点：
- 固定配置下 encode 是输入文本的纯函数（远程后端每个未命中文本允许一次外部调用）
- count_tokens 必须与 encode(text).total_count 一致
- 配置错误在构造时抛出，调用期只会抛出本次调用的失败
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from token_visualizer.models import TokenizationResult


@dataclass(frozen=True)
class BackendCapabilities:
    """
    后端能力描述，每个后端实例构造时确定一次。

    属性:
        token_ids: 是否提供 Token ID
        decoding: 是否能把 Token 解码回文本
        native_offsets: 偏移量是否由引擎原生提供（否则为累加重建）
        remote: 是否需要调用外部服务
    """

    token_ids: bool
    decoding: bool
    native_offsets: bool = False
    remote: bool = False


# 本地逐 Token 后端的通用能力
LOCAL_CAPABILITIES = BackendCapabilities(token_ids=True, decoding=True)

# 只能计数的远程后端
COUNT_ONLY_CAPABILITIES = BackendCapabilities(token_ids=False, decoding=False, remote=True)


@runtime_checkable
class Backend(Protocol):
    """
    分词后端协议。

    内置实现：
    - TiktokenBackend：OpenAI BPE 编码（cl100k_base / o200k_base 等）
    - SentencePieceBackend：LLaMA tokenizer.model
    - HFTokenizerBackend：HuggingFace tokenizer.json（LLaMA 3+）
    - ClaudeBackend：Anthropic Token Counting API（只有计数）

    最小实现示例::

        class WhitespaceBackend:
            name = "whitespace"
            capabilities = BackendCapabilities(token_ids=False, decoding=True)

            def encode(self, text, *, timeout=None):
                ...

            def count_tokens(self, text, *, timeout=None):
                return len(text.split())

            def supports_token_ids(self):
                return False

            def supports_decoding(self):
                return True
    """

    @property
    def name(self) -> str:
        """后端的可读名称。"""
        ...

    @property
    def capabilities(self) -> BackendCapabilities:
        """后端能力描述。"""
        ...

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        """
        将文本切分为 Token。

        参数:
            text: 待分词的文本
            timeout: 调用方给定的时限（秒），远程后端会传递给 HTTP 请求

        返回:
            TokenizationResult
        """
        ...

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        """只返回 Token 数量（比 encode 更轻量）。"""
        ...

    def supports_token_ids(self) -> bool:
        """是否提供 Token ID。"""
        ...

    def supports_decoding(self) -> bool:
        """是否能把 Token 解码回原文。"""
        ...
