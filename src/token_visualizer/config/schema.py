"""
配置的 Schema 定义与校验。

配置来源（优先级从低到高）：
1. 内置默认值
2. YAML 配置文件（token_visualizer.yaml 等）
3. CLI 参数覆盖

示例 YAML::

    backend:
      encoding: o200k_base
      claude_model: claude-3-5-haiku-20241022
      llama_model: models/llama2/tokenizer.model
    cache:
      enabled: true
    render:
      format: markdown
      show_ids: true
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from token_visualizer.config.defaults import (
    DEFAULT_CLAUDE_MODEL,
    DEFAULT_ENCODING,
    OUTPUT_FORMATS,
)


class BackendConfig(BaseModel):
    """后端构造参数。"""

    encoding: str = Field(default=DEFAULT_ENCODING, description="gpt4 / gpt3.5 使用的 tiktoken 编码")
    claude_model: str = Field(default=DEFAULT_CLAUDE_MODEL, description="Claude 模型标识")
    llama_model: str | None = Field(default=None, description="LLaMA tokenizer.model 路径")
    llama3_tokenizer: str | None = Field(default=None, description="LLaMA 3 tokenizer.json 路径")
    api_base_url: str = Field(default="https://api.anthropic.com", description="Anthropic API 根地址")
    api_timeout: float = Field(default=30.0, description="远程请求超时（秒）", gt=0)


class CacheConfig(BaseModel):
    """远程计数缓存配置。"""

    enabled: bool = Field(default=True, description="是否启用磁盘缓存")
    directory: str | None = Field(default=None, description="缓存目录，默认 ~/.cache/token-visualizer")


class RenderConfig(BaseModel):
    """渲染配置。"""

    format: str = Field(default="terminal", description="输出格式")
    show_ids: bool = Field(default=False, description="是否显示 Token ID")
    show_boundaries: bool = Field(default=False, description="是否显示 Token 边界")
    width: int = Field(default=120, description="终端渲染宽度", ge=40)

    @field_validator("format")
    @classmethod
    def _validate_format(cls, value: str) -> str:
        if value not in OUTPUT_FORMATS:
            raise ValueError(
                f"不支持的输出格式 '{value}'，可选值：{', '.join(OUTPUT_FORMATS)}"
            )
        return value


class ExecutionConfig(BaseModel):
    """多模型并发执行配置。"""

    max_workers: int = Field(default=4, description="并发分词的最大线程数", ge=1)
    timeout: float | None = Field(default=None, description="单次后端调用时限（秒）", gt=0)


class VisualizerConfig(BaseModel):
    """Token Visualizer 顶层配置。"""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
