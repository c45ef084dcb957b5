"""
Claude 计数后端 — Anthropic Token Counting API。

Anthropic 没有公开本地 tokenizer，只能通过 count_tokens 接口拿到 Token 数量，
拿不到逐 Token 的切分和 ID。因此 encode 返回的是"计数型结果"：
一个覆盖全文的哨兵 Token + 接口返回的计数。

接口有调用成本和速率限制，计数结果写入 DiskCache：
同一 (模型, 文本) 只会请求一次。缓存只存整数计数，不存完整结果。

请求失败不重试、不退避：一次失败就是这次调用失败。
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from token_visualizer.cache import DiskCache, make_cache_key
from token_visualizer.errors import (
    MalformedResponseError,
    MissingCredentialError,
    RemoteAPIError,
    TransportError,
)
from token_visualizer.models import TokenizationResult
from token_visualizer.tokenizer.protocol import COUNT_ONLY_CAPABILITIES, BackendCapabilities

logger = logging.getLogger(__name__)

API_KEY_ENV = "ANTHROPIC_API_KEY"
DEFAULT_BASE_URL = "https://api.anthropic.com"
COUNT_TOKENS_PATH = "/v1/messages/count_tokens"
ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_BETA = "token-counting-2024-11-01"

# 缓存键的后端标识
CACHE_BACKEND_ID = "claude"

# 错误信息中保留的响应体最大长度
_MAX_BODY_CHARS = 2000


class ClaudeBackend:
    """
    Anthropic Token Counting API 后端。

    用法::

        backend = ClaudeBackend(
            model="claude-3-5-sonnet-20241022",
            api_key=os.environ["ANTHROPIC_API_KEY"],
            cache=DiskCache(),
        )
        count = backend.count_tokens("Hello, world!")

    测试时可注入自定义 httpx.Client（例如挂载 httpx.MockTransport）。

    属性:
        model: Claude 模型标识
    """

    def __init__(
        self,
        model: str,
        api_key: str | None,
        cache: DiskCache | None = None,
        *,
        client: httpx.Client | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = 30.0,
    ) -> None:
        """
        初始化 ClaudeBackend。

        参数:
            model: Claude 模型标识
            api_key: Anthropic API Key
            cache: 计数缓存，None 表示不缓存
            client: 自定义 httpx.Client
            base_url: API 根地址
            timeout: 默认请求超时（秒），调用时传入的 timeout 优先

        异常:
            MissingCredentialError: api_key 为空
        """
        if not api_key:
            raise MissingCredentialError(
                what="无法创建 Claude 后端。",
                why=f"环境变量 {API_KEY_ENV} 未设置。",
                how=f"执行 export {API_KEY_ENV}=<your-key>，或改用本地模型（如 gpt4、gpt5）。",
                variable=API_KEY_ENV,
            )

        self._model = model
        self._api_key = api_key
        self._cache = cache
        self._url = base_url.rstrip("/") + COUNT_TOKENS_PATH
        self._timeout = timeout
        self._client = client or httpx.Client()
        logger.info("已创建 Claude 计数后端：%s（缓存：%s）", model, "开启" if cache else "关闭")

    @property
    def name(self) -> str:
        return f"Claude ({self._model})"

    @property
    def model(self) -> str:
        return self._model

    @property
    def capabilities(self) -> BackendCapabilities:
        return COUNT_ONLY_CAPABILITIES

    def cache_key(self, text: str) -> str:
        return make_cache_key(CACHE_BACKEND_ID, self._model, text)

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        """接口不提供逐 Token 信息，返回单个哨兵 Token + 计数。"""
        count = self.count_tokens(text, timeout=timeout)
        return TokenizationResult.count_only(text, model_label=self._model, count=count)

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        """
        返回 Token 数量，优先读缓存。

        异常:
            TransportError: 网络层失败
            RemoteAPIError: 非 2xx 响应
            MalformedResponseError: 响应体无法解析
        """
        key = self.cache_key(text)
        if self._cache is not None:
            cached = self._cache.lookup(key)
            if cached.hit and _is_count(cached.value):
                return cached.value

        count = self._request_count(text, timeout)

        if self._cache is not None:
            self._cache.put(key, count)
        return count

    def _request_count(self, text: str, timeout: float | None) -> int:
        payload = {
            "model": self._model,
            "messages": [{"role": "user", "content": text}],
        }
        headers = {
            "x-api-key": self._api_key,
            "content-type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
            "anthropic-beta": ANTHROPIC_BETA,
        }
        effective_timeout = timeout if timeout is not None else self._timeout

        try:
            response = self._client.post(
                self._url,
                content=json.dumps(payload).encode("utf-8"),
                headers=headers,
                timeout=effective_timeout,
            )
        except httpx.HTTPError as e:
            raise TransportError(
                what="调用 Anthropic Token Counting API 失败。",
                why=f"{type(e).__name__}: {e}",
                how="检查网络连接和代理设置，稍后重试。",
                backend=self.name,
            ) from e

        body = response.text
        if not response.is_success:
            raise RemoteAPIError(
                what=f"Anthropic Token Counting API 返回 HTTP {response.status_code}。",
                why=_truncate(body),
                how="401 表示 API Key 无效；404 表示模型名不存在；429 表示触发限流。",
                backend=self.name,
                status_code=response.status_code,
                body=_truncate(body),
            )

        try:
            data: Any = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                what="无法解析 Anthropic Token Counting API 的响应。",
                why=f"响应体不是合法 JSON：{e}",
                how="确认 API 根地址正确，且没有被代理改写响应。",
                backend=self.name,
                status_code=response.status_code,
                body=_truncate(body),
            ) from e

        count = data.get("input_tokens") if isinstance(data, dict) else None
        if not _is_count(count):
            raise MalformedResponseError(
                what="Anthropic Token Counting API 的响应缺少 input_tokens。",
                why=f"响应体：{_truncate(body)}",
                how="确认接口版本（anthropic-version / anthropic-beta）与服务端一致。",
                backend=self.name,
                status_code=response.status_code,
                body=_truncate(body),
            )

        logger.debug("Claude 计数：%s → %d tokens", self._model, count)
        return count

    def supports_token_ids(self) -> bool:
        return False

    def supports_decoding(self) -> bool:
        return False

    def close(self) -> None:
        self._client.close()


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _truncate(body: str) -> str:
    if len(body) <= _MAX_BODY_CHARS:
        return body
    return body[:_MAX_BODY_CHARS] + "…"
