"""
错误处理单元测试 — 测试所有异常类。

覆盖范围:
- errors/exceptions.py: 三段式错误信息、结构化属性、继承关系
"""

from __future__ import annotations

import pytest

from token_visualizer.errors import (
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


class TestTokenVisualizerError:
    """TokenVisualizerError 基类测试。"""

    def test_three_part_message(self) -> None:
        error = TokenVisualizerError(what="出错了。", why="因为 A。", how="做 B。")
        assert str(error) == "出错了。\n→ 原因：因为 A。\n→ 修复建议：做 B。"

    def test_what_only(self) -> None:
        error = TokenVisualizerError(what="出错了。")
        assert str(error) == "出错了。"
        assert error.to_dict() == {"error_type": "TokenVisualizerError", "what": "出错了。"}

    def test_to_dict_includes_details(self) -> None:
        error = RemoteAPIError(what="HTTP 500", status_code=500, body="boom", backend="claude")
        data = error.to_dict()
        assert data["error_type"] == "RemoteAPIError"
        assert data["details"] == {"backend": "claude", "status_code": 500, "body": "boom"}


class TestStructuredAttributes:
    """各子类携带的结构化字段。"""

    def test_unknown_model(self) -> None:
        error = UnknownModelError(what="x", model_id="gpt-6", available_models=["gpt4"])
        assert error.model_id == "gpt-6"
        assert error.available_models == ["gpt4"]

    def test_missing_credential(self) -> None:
        assert MissingCredentialError(what="x", variable="ANTHROPIC_API_KEY").variable == "ANTHROPIC_API_KEY"

    def test_unknown_encoding_is_model_file_error(self) -> None:
        error = UnknownEncodingError(what="x", encoding_name="nope")
        assert isinstance(error, ModelFileError)
        assert error.encoding_name == "nope"
        assert error.details["encoding_name"] == "nope"

    def test_remote_and_malformed_carry_status(self) -> None:
        for cls in (RemoteAPIError, MalformedResponseError):
            error = cls(what="x", status_code=429, body="slow down")
            assert error.status_code == 429
            assert error.body == "slow down"

    def test_unknown_format(self) -> None:
        assert UnknownFormatError(what="x", format_name="pdf").format_name == "pdf"


@pytest.mark.parametrize(
    ("cls", "base"),
    [
        (UnknownModelError, ConfigurationError),
        (MissingCredentialError, ConfigurationError),
        (ModelFileError, ConfigurationError),
        (ConfigValidationError, ConfigurationError),
        (ConfigLoadError, ConfigurationError),
        (TokenizationError, BackendCallError),
        (TransportError, BackendCallError),
        (RemoteAPIError, BackendCallError),
        (MalformedResponseError, BackendCallError),
        (UnknownFormatError, RenderError),
        (CacheError, TokenVisualizerError),
        (InputError, TokenVisualizerError),
    ],
)
def test_hierarchy(cls: type, base: type) -> None:
    assert issubclass(cls, base)
    assert issubclass(cls, TokenVisualizerError)
