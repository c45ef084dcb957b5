"""
Claude 计数后端单元测试。

使用 httpx.MockTransport 作为可计数的传输层，不访问真实网络。

覆盖范围:
- tokenizer/claude_backend.py: 请求格式、缓存命中、错误映射、超时传递
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from token_visualizer.cache import DiskCache
from token_visualizer.errors import (
    MalformedResponseError,
    MissingCredentialError,
    RemoteAPIError,
    TransportError,
)
from token_visualizer.tokenizer.claude_backend import (
    ANTHROPIC_BETA,
    ANTHROPIC_VERSION,
    ClaudeBackend,
)

MODEL = "claude-3-5-sonnet-20241022"


class RecordingTransport(httpx.MockTransport):
    """记录每次请求的 MockTransport。"""

    def __init__(self, status_code: int = 200, body: bytes | None = None, error: Exception | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._body = body if body is not None else b'{"input_tokens": 8}'
        self._error = error
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return httpx.Response(self._status_code, content=self._body)


def make_backend(
    transport: RecordingTransport,
    cache: DiskCache | None = None,
    timeout: float | None = 30.0,
) -> ClaudeBackend:
    return ClaudeBackend(
        model=MODEL,
        api_key="sk-ant-test",
        cache=cache,
        client=httpx.Client(transport=transport),
        timeout=timeout,
    )


# === 构造测试 ===


class TestConstruction:
    """构造阶段的配置错误。"""

    @pytest.mark.parametrize("api_key", ["", None])
    def test_missing_api_key(self, api_key: str | None) -> None:
        with pytest.raises(MissingCredentialError) as exc_info:
            ClaudeBackend(model=MODEL, api_key=api_key)
        assert exc_info.value.variable == "ANTHROPIC_API_KEY"

    def test_capabilities(self) -> None:
        backend = make_backend(RecordingTransport())
        assert not backend.supports_token_ids()
        assert not backend.supports_decoding()
        assert backend.capabilities.remote
        assert backend.name == f"Claude ({MODEL})"


# === 请求格式测试 ===


class TestRequest:
    """请求体、请求头与超时。"""

    def test_request_shape(self) -> None:
        transport = RecordingTransport()
        make_backend(transport).count_tokens("Hello, world!")

        [request] = transport.requests
        assert request.method == "POST"
        assert str(request.url) == "https://api.anthropic.com/v1/messages/count_tokens"
        assert request.headers["x-api-key"] == "sk-ant-test"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["anthropic-version"] == ANTHROPIC_VERSION == "2023-06-01"
        assert request.headers["anthropic-beta"] == ANTHROPIC_BETA == "token-counting-2024-11-01"
        assert json.loads(request.content) == {
            "model": MODEL,
            "messages": [{"role": "user", "content": "Hello, world!"}],
        }

    def test_default_timeout(self) -> None:
        transport = RecordingTransport()
        make_backend(transport, timeout=12.5).count_tokens("Hi")
        timeout = transport.requests[0].extensions["timeout"]
        assert timeout["read"] == 12.5

    def test_call_timeout_overrides_default(self) -> None:
        transport = RecordingTransport()
        make_backend(transport, timeout=12.5).count_tokens("Hi", timeout=2.0)
        timeout = transport.requests[0].extensions["timeout"]
        assert timeout["connect"] == timeout["read"] == 2.0


# === 结果与缓存测试 ===


class TestCounting:
    """计数、encode 形态与缓存。"""

    def test_encode_returns_count_only_result(self) -> None:
        backend = make_backend(RecordingTransport())
        result = backend.encode("Hello, world!")
        assert result.is_count_only
        assert result.total_count == 8
        assert result.model_label == MODEL
        assert result.tokens[0].text == "Hello, world!"
        assert result.tokens[0].end == len("Hello, world!".encode("utf-8"))

    def test_count_agrees_with_encode(self) -> None:
        backend = make_backend(RecordingTransport())
        assert backend.count_tokens("x") == backend.encode("x").total_count

    def test_cache_hit_skips_transport(self, disk_cache: DiskCache) -> None:
        transport = RecordingTransport()
        backend = make_backend(transport, cache=disk_cache)
        assert backend.count_tokens("Hello") == 8
        assert backend.count_tokens("Hello") == 8
        assert backend.encode("Hello").total_count == 8
        assert len(transport.requests) == 1
        assert disk_cache.get(backend.cache_key("Hello")) == 8

    def test_cache_shared_across_instances(self, cache_dir: Path) -> None:
        first = RecordingTransport()
        make_backend(first, cache=DiskCache(cache_dir)).count_tokens("Hello")
        second = RecordingTransport()
        assert make_backend(second, cache=DiskCache(cache_dir)).count_tokens("Hello") == 8
        assert second.requests == []

    def test_cache_key_is_exact_text(self, disk_cache: DiskCache) -> None:
        transport = RecordingTransport()
        backend = make_backend(transport, cache=disk_cache)
        backend.count_tokens("Hello")
        backend.count_tokens("hello")
        backend.count_tokens("Hello ")
        assert len(transport.requests) == 3
        assert backend.cache_key("Hello") == f"claude:{MODEL}:Hello"

    def test_corrupt_cache_entry_falls_back_to_request(self, disk_cache: DiskCache) -> None:
        transport = RecordingTransport()
        backend = make_backend(transport, cache=disk_cache)
        disk_cache.path_for(backend.cache_key("Hello")).write_text("garbage", encoding="utf-8")
        assert backend.count_tokens("Hello") == 8
        assert len(transport.requests) == 1
        assert disk_cache.get(backend.cache_key("Hello")) == 8

    def test_no_cache(self) -> None:
        transport = RecordingTransport()
        backend = make_backend(transport, cache=None)
        backend.count_tokens("Hello")
        backend.count_tokens("Hello")
        assert len(transport.requests) == 2


# === 错误映射测试 ===


class TestErrors:
    """远程调用失败的错误映射（不重试）。"""

    def test_non_success_status(self, disk_cache: DiskCache) -> None:
        transport = RecordingTransport(status_code=401, body=b'{"error": "invalid x-api-key"}')
        backend = make_backend(transport, cache=disk_cache)
        with pytest.raises(RemoteAPIError) as exc_info:
            backend.count_tokens("Hello")
        assert exc_info.value.status_code == 401
        assert "invalid x-api-key" in exc_info.value.body
        assert len(transport.requests) == 1
        assert backend.cache_key("Hello") not in disk_cache

    def test_transport_failure(self) -> None:
        transport = RecordingTransport(error=httpx.ConnectError("connection refused"))
        with pytest.raises(TransportError):
            make_backend(transport).count_tokens("Hello")
        assert len(transport.requests) == 1

    def test_timeout_is_transport_failure(self) -> None:
        transport = RecordingTransport(error=httpx.ReadTimeout("timed out"))
        with pytest.raises(TransportError):
            make_backend(transport).count_tokens("Hello", timeout=0.1)

    @pytest.mark.parametrize(
        "body",
        [b"not json", b"{}", b'{"input_tokens": "8"}', b'{"input_tokens": -1}', b"[1, 2]"],
    )
    def test_malformed_payload(self, body: bytes) -> None:
        transport = RecordingTransport(body=body)
        with pytest.raises(MalformedResponseError) as exc_info:
            make_backend(transport).count_tokens("Hello")
        assert exc_info.value.status_code == 200
