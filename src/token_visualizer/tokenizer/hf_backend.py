"""
基于 HuggingFace tokenizers 的后端（LLaMA 3.x 的 tokenizer.json）。

与 tiktoken / sentencepiece 不同，HF tokenizers 会返回每个 Token 的原生偏移，
这里直接使用原生偏移而不做累加重建。Python 绑定返回的是字符偏移，
统一转换为字节偏移后写入 Token。

字节级 BPE 会把一个多字节字符拆成多个 Token，它们的原生偏移相同。
Token 文本取原文切片，与前一个 Token 重叠的部分只归属前一个 Token，
因此在偏移完整覆盖原文时（字节级 BPE 即如此），拼接仍能还原原文。
"""

from __future__ import annotations

import logging
from pathlib import Path

from tokenizers import Tokenizer

from token_visualizer.errors import ModelFileError, TokenizationError
from token_visualizer.models import Token, TokenizationResult
from token_visualizer.tokenizer.offsets import char_to_byte_offsets
from token_visualizer.tokenizer.protocol import BackendCapabilities

logger = logging.getLogger(__name__)

_HF_CAPABILITIES = BackendCapabilities(token_ids=True, decoding=True, native_offsets=True)


class HFTokenizerBackend:
    """
    HuggingFace tokenizer.json 分词后端。

    用法::

        backend = HFTokenizerBackend("models/llama3/tokenizer.json")
        result = backend.encode("Hello, world!")
    """

    def __init__(self, tokenizer_path: str | Path, label: str = "llama3") -> None:
        """
        加载 tokenizer.json。

        异常:
            ModelFileError: 路径为空、文件不存在或无法解析
        """
        if not str(tokenizer_path).strip():
            raise ModelFileError(
                what="LLaMA 3 后端需要 tokenizer.json 文件路径。",
                why="未指定 tokenizer 文件路径。",
                how="通过 --llama3-tokenizer 或配置项 backend.llama3_tokenizer 指定文件路径。",
            )

        path = Path(tokenizer_path)
        if not path.is_file():
            raise ModelFileError(
                what=f"tokenizer 文件 '{path}' 不存在。",
                why=f"在路径 '{path.absolute()}' 下未找到该文件。",
                how="请从 HuggingFace 模型仓库下载 tokenizer.json，并检查路径是否正确。",
                file_path=str(path),
            )

        try:
            self._tokenizer = Tokenizer.from_file(str(path))
        except Exception as e:
            raise ModelFileError(
                what=f"无法加载 tokenizer 文件 '{path}'。",
                why=str(e),
                how="确认该文件是 HuggingFace tokenizers 格式的 tokenizer.json。",
                file_path=str(path),
            ) from e

        self._tokenizer_path = path
        self._label = label
        logger.info("已加载 HF tokenizer：%s", path)

    @property
    def name(self) -> str:
        return self._label

    @property
    def capabilities(self) -> BackendCapabilities:
        return _HF_CAPABILITIES

    def _encode(self, text: str):
        try:
            return self._tokenizer.encode(text, add_special_tokens=False)
        except Exception as e:
            raise TokenizationError(
                what="HF tokenizer 编码失败。",
                why=str(e),
                how="检查输入文本是否为合法的 UTF-8 文本。",
                backend=self.name,
            ) from e

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        """将文本编码为 Token 列表，偏移量取自引擎原生偏移。"""
        encoding = self._encode(text)
        byte_at = char_to_byte_offsets(text)
        limit = len(text)

        tokens: list[Token] = []
        covered = 0
        for token_id, (char_start, char_end) in zip(encoding.ids, encoding.offsets):
            char_start = min(max(char_start, 0), limit)
            char_end = min(max(char_end, char_start), limit)
            piece_start = max(char_start, covered)
            piece = text[piece_start:char_end] if char_end > piece_start else ""
            covered = max(covered, char_end)
            tokens.append(
                Token(
                    text=piece,
                    id=int(token_id),
                    start=byte_at[char_start],
                    end=byte_at[char_end],
                )
            )

        return TokenizationResult.from_tokens(tokens, source_text=text, model_label=self._label)

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        return len(self._encode(text).ids)

    def supports_token_ids(self) -> bool:
        return True

    def supports_decoding(self) -> bool:
        return True
