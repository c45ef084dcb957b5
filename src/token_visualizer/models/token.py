"""
Token 与 TokenizationResult 数据模型。

所有后端（tiktoken / sentencepiece / HF tokenizer.json / Claude 计数 API）
都返回同一种结果结构，渲染层只依赖这里定义的两个类型。

偏移量统一使用源文本 UTF-8 编码后的字节偏移，而不是 Python 字符下标。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Token ID 缺失时的哨兵值（计数型后端无法提供逐 Token 信息）
NO_TOKEN_ID = -1


def utf8_len(text: str) -> int:
    """返回文本 UTF-8 编码后的字节长度。"""
    return len(text.encode("utf-8"))


@dataclass(frozen=True)
class Token:
    """
    单个 Token。

    属性:
        text: 该 Token 解码后的文本
        id: Token ID，缺失时为 NO_TOKEN_ID
        start: 在源文本中的起始字节偏移
        end: 在源文本中的结束字节偏移（不含）
    """

    text: str
    id: int = NO_TOKEN_ID
    start: int = 0
    end: int = 0

    @property
    def has_id(self) -> bool:
        """是否携带真实的 Token ID。"""
        return self.id != NO_TOKEN_ID

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "id": self.id if self.has_id else None,
            "start": self.start,
            "end": self.end,
        }


@dataclass(frozen=True)
class TokenizationResult:
    """
    一次完整的分词结果。

    两种形态：
    - 逐 Token 后端：tokens 按 start 非递减排列，total_count == len(tokens)
    - 计数型后端：tokens 只有一个覆盖全文的哨兵 Token（无 ID），
      total_count 为外部接口返回的计数（可能不等于 1）

    用法::

        result = backend.encode("Hello, world!")
        print(result.total_count)
        for token in result.tokens:
            print(token.start, token.end, repr(token.text))

    属性:
        tokens: Token 序列
        total_count: Token 总数
        source_text: 原始输入文本
        model_label: 用于展示的模型 / 编码名称
    """

    tokens: tuple[Token, ...]
    total_count: int
    source_text: str
    model_label: str

    @classmethod
    def from_tokens(
        cls,
        tokens: list[Token] | tuple[Token, ...],
        source_text: str,
        model_label: str,
    ) -> TokenizationResult:
        """由逐 Token 列表构建结果，total_count 取 Token 数量。"""
        tokens = tuple(tokens)
        return cls(
            tokens=tokens,
            total_count=len(tokens),
            source_text=source_text,
            model_label=model_label,
        )

    @classmethod
    def count_only(cls, source_text: str, model_label: str, count: int) -> TokenizationResult:
        """构建计数型结果：单个覆盖全文的哨兵 Token + 外部计数。"""
        sentinel = Token(
            text=source_text,
            id=NO_TOKEN_ID,
            start=0,
            end=utf8_len(source_text),
        )
        return cls(
            tokens=(sentinel,),
            total_count=count,
            source_text=source_text,
            model_label=model_label,
        )

    @property
    def is_count_only(self) -> bool:
        """是否为计数型结果（没有逐 Token 明细）。"""
        return len(self.tokens) == 1 and not self.tokens[0].has_id

    @property
    def has_token_ids(self) -> bool:
        return any(token.has_id for token in self.tokens)

    def reconstructed_text(self) -> str:
        """按 start 升序拼接 Token 文本。"""
        ordered = sorted(self.tokens, key=lambda t: t.start)
        return "".join(token.text for token in ordered)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 JSON 输出。"""
        return {
            "model": self.model_label,
            "total_count": self.total_count,
            "count_only": self.is_count_only,
            "tokens": [token.to_dict() for token in self.tokens],
        }
