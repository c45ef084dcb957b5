"""
Token 偏移量计算。

大多数本地引擎只返回 Token ID 序列，不返回偏移量。
这里用"累加已放置 Token 的字节长度"的方式重建偏移：
只有当所有 Token 的字节拼接恰好等于原文时，重建结果才是精确的。

HF tokenizers 会返回原生的字符偏移，用 char_to_byte_offsets 转为字节偏移。
"""

from __future__ import annotations

import codecs
from collections.abc import Iterable

from token_visualizer.models import Token


def tokens_from_pieces(pieces: Iterable[tuple[int, bytes]]) -> list[Token]:
    """
    由 (token_id, 原始字节) 序列构建 Token 列表，偏移量按字节累加。

    单个 Token 可能只包含多字节字符的一部分。解码使用增量解码器：
    不完整的字节留到下一个 Token，字符归属于补全它的那个 Token，
    因此拼接所有 Token 文本仍能得到原文。偏移量始终是精确的字节位置。

    参数:
        pieces: 每个 Token 的 ID 与其解码后的原始字节

    返回:
        按 start 升序排列的 Token 列表
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    tokens: list[Token] = []
    position = 0
    for token_id, raw in pieces:
        end = position + len(raw)
        tokens.append(
            Token(
                text=decoder.decode(raw),
                id=token_id,
                start=position,
                end=end,
            )
        )
        position = end

    # 末尾残留的不完整字节
    tail = decoder.decode(b"", final=True)
    if tail and tokens:
        last = tokens[-1]
        tokens[-1] = Token(text=last.text + tail, id=last.id, start=last.start, end=last.end)
    return tokens


def char_to_byte_offsets(text: str) -> list[int]:
    """
    返回字符下标到字节偏移的映射表。

    结果长度为 len(text) + 1，table[i] 是 text[:i] 的 UTF-8 字节长度。
    """
    table = [0] * (len(text) + 1)
    total = 0
    for i, ch in enumerate(text):
        total += len(ch.encode("utf-8"))
        table[i + 1] = total
    return table
