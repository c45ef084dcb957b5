"""
结构化异常体系 — 错误信息即文档。

每条异常遵循"三段式"规范：
1. What went wrong（发生了什么）
2. Why it happened（为什么发生）
3. How to fix it（怎么修）

异常按处理策略分为四类：
- 配置错误（ConfigurationError）：构造后端时立即抛出，永不重试
- 调用错误（BackendCallError）：仅由触发它的那次 encode / count 抛出
- 缓存错误（CacheError）：单条缓存读写失败降级为未命中，不会走到这里
- 渲染错误（RenderError）：致命，直接交给调用方

示例::

    MissingCredentialError(
        what="无法创建 Claude 后端。",
        why="环境变量 ANTHROPIC_API_KEY 未设置。",
        how="export ANTHROPIC_API_KEY=sk-ant-...，或改用本地模型（如 gpt4）。",
        variable="ANTHROPIC_API_KEY",
    )
"""

from __future__ import annotations

from typing import Any


class TokenVisualizerError(Exception):
    """
    Token Visualizer 异常基类。

    属性:
        what: 发生了什么
        why: 为什么发生
        how: 怎么修复
        details: 额外的上下文信息（用于调试）
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.what = what
        self.why = why
        self.how = how
        self.details = details or {}

        parts = [what]
        if why:
            parts.append(f"→ 原因：{why}")
        if how:
            parts.append(f"→ 修复建议：{how}")

        self.full_message = "\n".join(parts)
        super().__init__(self.full_message)

    def __str__(self) -> str:
        return self.full_message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 JSON 输出。"""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "what": self.what,
        }
        if self.why:
            result["why"] = self.why
        if self.how:
            result["how"] = self.how
        if self.details:
            result["details"] = self.details
        return result


# === 配置相关异常 ===


class ConfigurationError(TokenVisualizerError):
    """
    配置异常基类。

    凡是"换一次调用也不会好"的问题都属于配置错误：
    缺少凭证、模型文件不存在、模型标识未知。它们必须在后端构造时抛出。
    """

    pass


class UnknownModelError(ConfigurationError):
    """
    未知模型标识。

    示例::

        raise UnknownModelError(
            what="未知模型 'gpt-6'。",
            why="该标识不在支持的模型集合中。",
            how="可用模型：gpt4, gpt3.5, gpt5, claude, llama, llama3。",
            model_id="gpt-6",
            available_models=["gpt4", "gpt3.5", "gpt5", "claude", "llama", "llama3"],
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        model_id: str = "",
        available_models: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"model_id": model_id}
        if available_models:
            details["available_models"] = available_models
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.model_id = model_id
        self.available_models = list(available_models or [])


class MissingCredentialError(ConfigurationError):
    """远程后端缺少 API 凭证。"""

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        variable: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"variable": variable}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.variable = variable


class ModelFileError(ConfigurationError):
    """
    本地模型文件缺失、不可读或格式无效。

    示例::

        raise ModelFileError(
            what="无法加载 sentencepiece 模型。",
            why="文件 'models/tokenizer.model' 不存在。",
            how="通过 --llama-model 指定 LLaMA 的 tokenizer.model 文件路径。",
            file_path="models/tokenizer.model",
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"file_path": file_path}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.file_path = file_path


class UnknownEncodingError(ModelFileError):
    """tiktoken 编码方案不存在。"""

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        encoding_name: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(what=what, why=why, how=how, encoding_name=encoding_name, **kwargs)
        self.encoding_name = encoding_name


class ConfigValidationError(ConfigurationError):
    """
    配置文件校验异常。

    当 YAML 配置文件字段不合法时抛出。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        config_path: str = "",
        field_path: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {
            "config_path": config_path,
            "field_path": field_path,
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.config_path = config_path
        self.field_path = field_path


class ConfigLoadError(ConfigurationError):
    """配置文件不存在、无法读取或不是合法 YAML。"""

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"file_path": file_path}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.file_path = file_path


# === 调用相关异常 ===


class BackendCallError(TokenVisualizerError):
    """
    单次 encode / count 调用失败。

    只由触发它的那次调用抛出，不会重试。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        backend: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"backend": backend}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.backend = backend


class TokenizationError(BackendCallError):
    """本地分词引擎在编码时抛出异常。"""

    pass


class TransportError(BackendCallError):
    """网络层失败：连接失败、超时等。"""

    pass


class RemoteAPIError(BackendCallError):
    """
    远程接口返回非 2xx 响应。

    status_code 与 body 保留原始响应，便于排查。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        status_code: int = 0,
        body: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(what=what, why=why, how=how, status_code=status_code, body=body, **kwargs)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(BackendCallError):
    """远程接口返回 2xx，但响应体无法解析或缺少 input_tokens。"""

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        status_code: int = 0,
        body: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(what=what, why=why, how=how, status_code=status_code, body=body, **kwargs)
        self.status_code = status_code
        self.body = body


# === 缓存相关异常 ===


class CacheError(TokenVisualizerError):
    """
    缓存异常。

    仅在缓存目录本身不可用时抛出（构造阶段）。
    单条缓存的读写失败会降级为未命中，不抛异常。
    """

    pass


# === 渲染相关异常 ===


class RenderError(TokenVisualizerError):
    """渲染或 Markdown → HTML 转换失败。"""

    pass


class UnknownFormatError(RenderError):
    """不支持的输出格式。"""

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        format_name: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"format": format_name}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.format_name = format_name


# === 输入相关异常 ===


class InputError(TokenVisualizerError):
    """输入文本为空或无法读取。"""

    pass
