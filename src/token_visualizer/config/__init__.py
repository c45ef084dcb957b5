"""
Token Visualizer 配置模块。

提供 YAML 配置加载、Schema 校验和支持的模型集合。
"""

from token_visualizer.config.defaults import (
    MODEL_SPECS,
    OUTPUT_FORMATS,
    ModelSpec,
    list_models,
)
from token_visualizer.config.loader import load_config
from token_visualizer.config.schema import (
    BackendConfig,
    CacheConfig,
    ExecutionConfig,
    RenderConfig,
    VisualizerConfig,
)

__all__ = [
    "MODEL_SPECS",
    "OUTPUT_FORMATS",
    "BackendConfig",
    "CacheConfig",
    "ExecutionConfig",
    "ModelSpec",
    "RenderConfig",
    "VisualizerConfig",
    "list_models",
    "load_config",
]
