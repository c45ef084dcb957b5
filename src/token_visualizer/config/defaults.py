"""
默认配置与支持的模型集合。

模型标识是一个封闭集合，CLI 和注册表都以这里为准。
每个标识对应一种后端类型以及该后端需要的默认参数。
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class ModelSpec:
    """
    模型标识的静态描述。

    属性:
        model_id: CLI 中使用的标识（如 "gpt4"）
        backend: 后端类型：tiktoken / sentencepiece / hf / claude
        description: 展示给用户的说明
        encoding: 固定的 tiktoken 编码；None 表示使用配置中的 backend.encoding
    """

    model_id: str
    backend: str
    description: str
    encoding: str | None = None


DEFAULT_ENCODING = "cl100k_base"
DEFAULT_CLAUDE_MODEL = "claude-3-5-sonnet-20241022"

MODEL_SPECS: MappingProxyType[str, ModelSpec] = MappingProxyType({
    "gpt4": ModelSpec("gpt4", "tiktoken", "GPT-4（tiktoken，编码可配置，默认 cl100k_base）"),
    "gpt3.5": ModelSpec("gpt3.5", "tiktoken", "GPT-3.5（tiktoken，编码可配置，默认 cl100k_base）"),
    "gpt5": ModelSpec("gpt5", "tiktoken", "GPT-5（tiktoken o200k_base）", encoding="o200k_base"),
    "gpt5-mini": ModelSpec("gpt5-mini", "tiktoken", "GPT-5 mini（tiktoken o200k_base）", encoding="o200k_base"),
    "gpt5-nano": ModelSpec("gpt5-nano", "tiktoken", "GPT-5 nano（tiktoken o200k_base）", encoding="o200k_base"),
    "claude": ModelSpec("claude", "claude", "Claude（Anthropic Token Counting API，仅计数）"),
    "llama": ModelSpec("llama", "sentencepiece", "LLaMA 1/2（sentencepiece tokenizer.model）"),
    "llama3": ModelSpec("llama3", "hf", "LLaMA 3.x（HuggingFace tokenizer.json）"),
})

# 支持的输出格式
OUTPUT_FORMATS: tuple[str, ...] = ("terminal", "markdown", "html", "markdown-html")


def list_models() -> list[str]:
    """返回所有支持的模型标识（保持声明顺序）。"""
    return list(MODEL_SPECS.keys())
