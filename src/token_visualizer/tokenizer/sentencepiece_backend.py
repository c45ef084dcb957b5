"""
基于 sentencepiece 的后端（LLaMA 1/2 的 tokenizer.model）。

sentencepiece 用 "▁"（U+2581）标记词首空格，并在文本开头补一个虚拟空格。
逐个 Token 调用 decode 会吃掉每个 Token 的前导空格，拼接后丢失原文空白，
因此这里直接读取 piece，把 "▁" 还原为空格，字节回退 Token（<0xNN>）还原为原始字节，
最后去掉引擎补的那个虚拟前缀空格。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import sentencepiece as spm

from token_visualizer.errors import ModelFileError, TokenizationError
from token_visualizer.models import TokenizationResult
from token_visualizer.tokenizer.offsets import tokens_from_pieces
from token_visualizer.tokenizer.protocol import LOCAL_CAPABILITIES, BackendCapabilities

logger = logging.getLogger(__name__)

_WORD_BOUNDARY = "▁"
_BYTE_PIECE = re.compile(r"^<0x([0-9A-Fa-f]{2})>$")


class SentencePieceBackend:
    """
    LLaMA sentencepiece 分词后端。

    用法::

        backend = SentencePieceBackend("models/llama/tokenizer.model")
        result = backend.encode("Hello, world!")

    属性:
        model_path: tokenizer.model 文件路径
    """

    def __init__(self, model_path: str | Path, label: str = "LLaMA") -> None:
        """
        加载 sentencepiece 模型。

        异常:
            ModelFileError: 路径为空、文件不存在或模型无法加载
        """
        if not str(model_path).strip():
            raise ModelFileError(
                what="LLaMA 后端需要 tokenizer.model 文件路径。",
                why="未指定模型文件路径。",
                how="通过 --llama-model 或配置项 backend.llama_model 指定文件路径。",
            )

        path = Path(model_path)
        if not path.is_file():
            raise ModelFileError(
                what=f"sentencepiece 模型文件 '{path}' 不存在。",
                why=f"在路径 '{path.absolute()}' 下未找到该文件。",
                how="请从模型发布页下载 tokenizer.model，并检查路径是否正确。",
                file_path=str(path),
            )

        try:
            self._processor = spm.SentencePieceProcessor(model_file=str(path))
        except Exception as e:
            raise ModelFileError(
                what=f"无法加载 sentencepiece 模型 '{path}'。",
                why=str(e),
                how="确认该文件是 sentencepiece 的 tokenizer.model，而不是 tokenizer.json。"
                    "LLaMA 3+ 的 tokenizer.json 请使用 llama3 模型。",
                file_path=str(path),
            ) from e

        self._model_path = path
        self._label = label
        logger.info("已加载 sentencepiece 模型：%s", path)

    @property
    def name(self) -> str:
        return "LLaMA (sentencepiece)"

    @property
    def model_path(self) -> Path:
        return self._model_path

    @property
    def capabilities(self) -> BackendCapabilities:
        return LOCAL_CAPABILITIES

    def _encode_ids(self, text: str) -> list[int]:
        try:
            return list(self._processor.encode(text, out_type=int))
        except Exception as e:
            raise TokenizationError(
                what="sentencepiece 编码失败。",
                why=str(e),
                how="检查输入文本是否为合法的 UTF-8 文本。",
                backend=self.name,
            ) from e

    def _piece_bytes(self, token_id: int) -> bytes:
        piece = self._processor.id_to_piece(token_id)
        if self._processor.is_byte(token_id):
            match = _BYTE_PIECE.match(piece)
            if match:
                return bytes([int(match.group(1), 16)])
        if self._processor.is_control(token_id):
            return b""
        return piece.replace(_WORD_BOUNDARY, " ").encode("utf-8")

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        """将文本编码为 Token 列表，偏移量按字节累加。"""
        ids = self._encode_ids(text)
        raw_pieces = [self._piece_bytes(token_id) for token_id in ids]

        # 引擎在开头补了一个虚拟空格时，输出比原文多出一个前导空格；
        # 只去掉这一个，从第一个非空 piece 上去（跳过 <s> 之类的空控制 Token）
        joined = b"".join(raw_pieces)
        if _leading_spaces(joined) > _leading_spaces(text.encode("utf-8")):
            first = next(i for i, raw in enumerate(raw_pieces) if raw)
            raw_pieces[first] = raw_pieces[first][1:]

        tokens = tokens_from_pieces(zip(ids, raw_pieces))
        return TokenizationResult.from_tokens(tokens, source_text=text, model_label=self._label)

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        return len(self._encode_ids(text))

    def supports_token_ids(self) -> bool:
        return True

    def supports_decoding(self) -> bool:
        return True


def _leading_spaces(data: bytes) -> int:
    return len(data) - len(data.lstrip(b" "))
