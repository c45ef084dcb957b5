"""
Token Visualizer 分词后端模块。

提供统一的 Backend 协议和四种实现，按模型标识从静态注册表构造。
"""

from token_visualizer.tokenizer.claude_backend import ClaudeBackend
from token_visualizer.tokenizer.hf_backend import HFTokenizerBackend
from token_visualizer.tokenizer.protocol import Backend, BackendCapabilities
from token_visualizer.tokenizer.registry import (
    BACKEND_FACTORIES,
    create_backend,
    supported_models,
    validate_models,
)
from token_visualizer.tokenizer.sentencepiece_backend import SentencePieceBackend
from token_visualizer.tokenizer.tiktoken_backend import TiktokenBackend

__all__ = [
    "BACKEND_FACTORIES",
    "Backend",
    "BackendCapabilities",
    "ClaudeBackend",
    "HFTokenizerBackend",
    "SentencePieceBackend",
    "TiktokenBackend",
    "create_backend",
    "supported_models",
    "validate_models",
]
