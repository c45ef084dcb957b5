"""
Token Visualizer 结构化异常体系。

每一条用户可见的错误都是产品界面的一部分。
所有异常遵循"三段式"规范：What / Why / How to fix。
"""

from token_visualizer.errors.exceptions import (
    BackendCallError,
    CacheError,
    ConfigLoadError,
    ConfigurationError,
    ConfigValidationError,
    InputError,
    MalformedResponseError,
    MissingCredentialError,
    ModelFileError,
    RemoteAPIError,
    RenderError,
    TokenizationError,
    TokenVisualizerError,
    TransportError,
    UnknownEncodingError,
    UnknownFormatError,
    UnknownModelError,
)

__all__ = [
    "BackendCallError",
    "CacheError",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigurationError",
    "InputError",
    "MalformedResponseError",
    "MissingCredentialError",
    "ModelFileError",
    "RemoteAPIError",
    "RenderError",
    "TokenVisualizerError",
    "TokenizationError",
    "TransportError",
    "UnknownEncodingError",
    "UnknownFormatError",
    "UnknownModelError",
]
