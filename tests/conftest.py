"""
测试套件共享 Fixtures 和配置。

本文件定义了所有测试中可复用的 fixtures、假后端和辅助函数。
假后端按空白切分文本，不依赖任何分词引擎或模型文件。
"""

from __future__ import annotations

import re
import threading
from pathlib import Path

import pytest

from token_visualizer.cache import DiskCache
from token_visualizer.config.schema import VisualizerConfig
from token_visualizer.errors import TokenizationError
from token_visualizer.models import Token, TokenizationResult
from token_visualizer.tokenizer.offsets import tokens_from_pieces
from token_visualizer.tokenizer.protocol import (
    COUNT_ONLY_CAPABILITIES,
    LOCAL_CAPABILITIES,
    BackendCapabilities,
)

_WORDS = re.compile(r"\S+|\s+")


# === 假后端 ===


class WhitespaceBackend:
    """按"单词 / 空白串"切分的假后端，Token ID 为 100 + 序号。"""

    def __init__(self, label: str = "whitespace", fail: bool = False) -> None:
        self._label = label
        self._fail = fail
        self.encode_calls = 0
        self.closed = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return f"Whitespace ({self._label})"

    @property
    def capabilities(self) -> BackendCapabilities:
        return LOCAL_CAPABILITIES

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        with self._lock:
            self.encode_calls += 1
        if self._fail:
            raise TokenizationError(what=f"{self._label} 编码失败。", backend=self.name)
        pieces = [(100 + i, word.encode("utf-8")) for i, word in enumerate(_WORDS.findall(text))]
        return TokenizationResult.from_tokens(
            tokens_from_pieces(pieces), source_text=text, model_label=self._label
        )

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        return self.encode(text, timeout=timeout).total_count

    def supports_token_ids(self) -> bool:
        return True

    def supports_decoding(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


class FixedCountBackend:
    """只返回固定计数的假后端（模拟远程计数接口）。"""

    def __init__(self, label: str = "counter", count: int = 42) -> None:
        self._label = label
        self._count = count
        self.timeouts: list[float | None] = []

    @property
    def name(self) -> str:
        return f"Counter ({self._label})"

    @property
    def capabilities(self) -> BackendCapabilities:
        return COUNT_ONLY_CAPABILITIES

    def encode(self, text: str, *, timeout: float | None = None) -> TokenizationResult:
        return TokenizationResult.count_only(text, self._label, self.count_tokens(text, timeout=timeout))

    def count_tokens(self, text: str, *, timeout: float | None = None) -> int:
        self.timeouts.append(timeout)
        return self._count

    def supports_token_ids(self) -> bool:
        return False

    def supports_decoding(self) -> bool:
        return False


@pytest.fixture
def fake_factory():
    """
    facade 使用的假后端工厂：gpt4 / gpt5 / llama 为 WhitespaceBackend，claude 为计数后端。

    创建过的后端记录在 factory.created 中。
    """
    created: dict[str, object] = {}

    def factory(model_id: str, config: VisualizerConfig):
        if model_id == "claude":
            backend = FixedCountBackend(label="claude-test", count=7)
        else:
            backend = WhitespaceBackend(label=model_id)
        created[model_id] = backend
        return backend

    factory.created = created  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def failing_factory():
    """返回一个工厂构造器：指定模型的后端在 encode 时失败。"""

    def make(failing_model: str):
        def factory(model_id: str, config: VisualizerConfig) -> WhitespaceBackend:
            return WhitespaceBackend(label=model_id, fail=model_id == failing_model)

        return factory

    return make


# === 数据模型 Fixtures ===


@pytest.fixture
def hello_result() -> TokenizationResult:
    """"Hello, world!" 的四个 Token（与 cl100k_base 的切分一致）。"""
    tokens = [
        Token(text="Hello", id=9906, start=0, end=5),
        Token(text=",", id=11, start=5, end=6),
        Token(text=" world", id=1917, start=6, end=12),
        Token(text="!", id=0, start=12, end=13),
    ]
    return TokenizationResult.from_tokens(tokens, source_text="Hello, world!", model_label="cl100k_base")


@pytest.fixture
def twenty_token_result() -> TokenizationResult:
    """20 个单字符 Token，用于验证调色板循环。"""
    text = "abcdefghijklmnopqrst"
    tokens = [Token(text=ch, id=i, start=i, end=i + 1) for i, ch in enumerate(text)]
    return TokenizationResult.from_tokens(tokens, source_text=text, model_label="synthetic")


@pytest.fixture
def count_only_result() -> TokenizationResult:
    return TokenizationResult.count_only("Hello, world!", "claude-3-5-sonnet-20241022", 8)


# === 缓存 / 配置 Fixtures ===


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def disk_cache(cache_dir: Path) -> DiskCache:
    return DiskCache(cache_dir)


@pytest.fixture
def config(cache_dir: Path) -> VisualizerConfig:
    """缓存目录指向临时目录的默认配置。"""
    return VisualizerConfig(cache={"directory": str(cache_dir)})


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """切换到临时目录，避免读到工作区里的 token_visualizer.yaml。"""
    monkeypatch.chdir(tmp_path)
