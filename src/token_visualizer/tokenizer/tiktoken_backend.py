"""
基于 tiktoken 的 BPE 后端。

tiktoken 是 OpenAI 官方的 tokenizer 库，支持 GPT 系列模型使用的 BPE 编码方案：
- cl100k_base：GPT-4、GPT-3.5-turbo
- o200k_base：GPT-4o、GPT-5 系列
- p50k_base：Codex
- r50k_base：GPT-3

tiktoken 不返回偏移量，偏移由每个 Token 的原始字节长度累加得出。
"""

from __future__ import annotations

import logging

import tiktoken

from token_visualizer.errors import ModelFileError, TokenizationError, UnknownEncodingError
from token_visualizer.models import TokenizationResult
from token_visualizer.tokenizer.offsets import tokens_from_pieces
from token_visualizer.tokenizer.protocol import LOCAL_CAPABILITIES, BackendCapabilities

logger = logging.getLogger(__name__)


class TiktokenBackend:
    """
    基于 tiktoken 的分词后端。

    用法::

        backend = TiktokenBackend()  # 默认 cl100k_base
        result = backend.encode("Hello, world!")

        backend = TiktokenBackend(encoding_name="o200k_base")  # GPT-4o / GPT-5

    属性:
        encoding_name: tiktoken 编码方案名称
    """

    def __init__(self, encoding_name: str = "cl100k_base", label: str | None = None) -> None:
        """
        初始化 TiktokenBackend。

        参数:
            encoding_name: tiktoken 编码方案名称
            label: 结果中展示的模型名称，默认使用编码方案名

        异常:
            UnknownEncodingError: 编码方案不存在
            ModelFileError: 编码方案存在，但词表下载或读取失败
        """
        self._encoding_name = encoding_name
        self._label = label or encoding_name
        if encoding_name not in tiktoken.list_encoding_names():
            raise UnknownEncodingError(
                what=f"未知的 tiktoken 编码方案 '{encoding_name}'。",
                why=f"已安装的 tiktoken 只提供：{', '.join(tiktoken.list_encoding_names())}。",
                how="常用编码方案：cl100k_base（GPT-4）、o200k_base（GPT-4o / GPT-5）、"
                    "p50k_base、r50k_base。请通过 --encoding 指定其中之一。",
                encoding_name=encoding_name,
            )
        try:
            self._encoding = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            # 首次使用时 tiktoken 需要联网下载词表，之后读取本地缓存
            raise ModelFileError(
                what=f"无法加载 tiktoken 编码方案 '{encoding_name}' 的词表。",
                why=f"词表下载或读取失败（{type(e).__name__}: {e}）。",
                how="检查网络连接后重试；离线环境请把词表文件放入 TIKTOKEN_CACHE_DIR 指向的目录。",
                encoding_name=encoding_name,
            ) from e
        logger.info("已加载 tiktoken 编码方案：%s", encoding_name)

    @property
    def name(self) -> str:
        return f"OpenAI ({self._encoding_name})"

    @property
    def encoding_name(self) -> str:
        return self._encoding_name

    @property
    def capabilities(self) -> BackendCapabilities:
        return LOCAL_CAPABILITIES

    def _encode_ids(self, text: str) -> list[int]:
        # 特殊 Token 字面量（如 <|endoftext|>）按普通文本处理
        try:
            return self._encoding.encode(text, disallowed_special=())
        except Exception as e:
            raise TokenizationError(
                what=f"tiktoken 编码失败（{self._encoding_name}）。",
                why=str(e),
                how="检查输入文本是否为合法的 UTF-8 文本。",
                backend=self.name,
            ) from e

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        """将文本编码为 Token 列表，逐个解码出原始字节并累加偏移。"""
        ids = self._encode_ids(text)
        pieces = ((token_id, self._encoding.decode_single_token_bytes(token_id)) for token_id in ids)
        tokens = tokens_from_pieces(pieces)
        return TokenizationResult.from_tokens(tokens, source_text=text, model_label=self._label)

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        if not text:
            return 0
        return len(self._encode_ids(text))

    def supports_token_ids(self) -> bool:
        return True

    def supports_decoding(self) -> bool:
        return True

    def decode(self, token_ids: list[int]) -> str:
        """将 Token ID 列表解码为文本。"""
        return self._encoding.decode(token_ids)
