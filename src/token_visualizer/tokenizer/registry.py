"""
后端注册表 — 模型标识到后端构造函数的静态映射。

模型标识是封闭集合（见 config.defaults.MODEL_SPECS）。
所有标识在构造任何后端之前统一校验一次，未知标识立即报错，
而不是等到第 N 个模型分词时才发现。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from types import MappingProxyType

from token_visualizer.cache import DiskCache
from token_visualizer.config.defaults import MODEL_SPECS, list_models
from token_visualizer.config.schema import VisualizerConfig
from token_visualizer.errors import ModelFileError, UnknownModelError
from token_visualizer.tokenizer.claude_backend import API_KEY_ENV, ClaudeBackend
from token_visualizer.tokenizer.hf_backend import HFTokenizerBackend
from token_visualizer.tokenizer.protocol import Backend
from token_visualizer.tokenizer.sentencepiece_backend import SentencePieceBackend
from token_visualizer.tokenizer.tiktoken_backend import TiktokenBackend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str, VisualizerConfig], Backend]


def _create_tiktoken(model_id: str, config: VisualizerConfig) -> Backend:
    spec = MODEL_SPECS[model_id]
    return TiktokenBackend(spec.encoding or config.backend.encoding)


def _create_claude(model_id: str, config: VisualizerConfig) -> Backend:
    cache = DiskCache(config.cache.directory) if config.cache.enabled else None
    return ClaudeBackend(
        model=config.backend.claude_model,
        api_key=os.environ.get(API_KEY_ENV, ""),
        cache=cache,
        base_url=config.backend.api_base_url,
        timeout=config.backend.api_timeout,
    )


def _create_sentencepiece(model_id: str, config: VisualizerConfig) -> Backend:
    if not config.backend.llama_model:
        raise ModelFileError(
            what="LLaMA 模型需要 tokenizer.model 文件路径。",
            why="未指定 --llama-model。",
            how="通过 --llama-model 指定 LLaMA 的 tokenizer.model 文件路径。",
        )
    return SentencePieceBackend(config.backend.llama_model)


def _create_hf(model_id: str, config: VisualizerConfig) -> Backend:
    if not config.backend.llama3_tokenizer:
        raise ModelFileError(
            what="LLaMA 3 模型需要 tokenizer.json 文件路径。",
            why="未指定 --llama3-tokenizer。",
            how="通过 --llama3-tokenizer 指定 HuggingFace 的 tokenizer.json 文件路径。",
        )
    return HFTokenizerBackend(config.backend.llama3_tokenizer)


_FACTORIES_BY_KIND: dict[str, BackendFactory] = {
    "tiktoken": _create_tiktoken,
    "claude": _create_claude,
    "sentencepiece": _create_sentencepiece,
    "hf": _create_hf,
}

BACKEND_FACTORIES: MappingProxyType[str, BackendFactory] = MappingProxyType({
    model_id: _FACTORIES_BY_KIND[spec.backend] for model_id, spec in MODEL_SPECS.items()
})


def supported_models() -> list[str]:
    """返回所有支持的模型标识。"""
    return list_models()


def validate_models(models: Iterable[str]) -> list[str]:
    """
    校验模型标识列表。

    参数:
        models: 模型标识序列

    返回:
        原样顺序的模型标识列表（重复的标识各自保留）

    异常:
        UnknownModelError: 列表为空或包含未知标识
    """
    requested = list(models)
    available = supported_models()
    if not requested:
        raise UnknownModelError(
            what="未指定任何模型。",
            why="模型列表为空。",
            how=f"通过 --model 指定至少一个模型，可用模型：{', '.join(available)}。",
            available_models=available,
        )

    for model_id in requested:
        if model_id not in BACKEND_FACTORIES:
            raise UnknownModelError(
                what=f"未知模型 '{model_id}'。",
                why="该标识不在支持的模型集合中。",
                how=f"可用模型：{', '.join(available)}。",
                model_id=model_id,
                available_models=available,
            )
    return requested


def create_backend(model_id: str, config: VisualizerConfig | None = None) -> Backend:
    """
    根据模型标识构造后端。

    参数:
        model_id: 模型标识（如 "gpt4"、"claude"）
        config: 配置，None 时使用默认配置

    返回:
        Backend 实例

    异常:
        UnknownModelError: 未知标识
        ConfigurationError: 缺少凭证、模型文件等构造期错误

    示例::

        backend = create_backend("gpt5")
        result = backend.encode("Hello, world!")
    """
    validate_models([model_id])
    config = config or VisualizerConfig()
    backend = BACKEND_FACTORIES[model_id](model_id, config)
    logger.debug("模型 '%s' → 后端 %s", model_id, backend.name)
    return backend
