"""
Token Visualizer 数据模型。
"""

from token_visualizer.models.token import (
    NO_TOKEN_ID,
    Token,
    TokenizationResult,
    utf8_len,
)

__all__ = [
    "NO_TOKEN_ID",
    "Token",
    "TokenizationResult",
    "utf8_len",
]
