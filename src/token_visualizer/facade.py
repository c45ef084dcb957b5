"""
TokenVisualizer — 顶层 Facade API。

把"解析模型 → 构造后端 → 分词 / 计数 → 渲染"串成一次调用。

最简用法::

    from token_visualizer import TokenVisualizer

    visualizer = TokenVisualizer()
    print(visualizer.visualize("Hello, world!", model="gpt4"))

多模型对比::

    output = visualizer.compare(text, models=["gpt4", "gpt5", "claude"], fmt="markdown")

执行模型：
1. 先校验所有模型标识、构造全部后端，配置错误在任何分词之前暴露
2. 各模型在线程池中并发分词，结果保持请求顺序
3. 任一后端失败即中止整次调用，不产生部分输出
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, TypeVar

from token_visualizer.config.loader import load_config
from token_visualizer.config.schema import VisualizerConfig
from token_visualizer.models import TokenizationResult
from token_visualizer.render import Renderer, RenderOptions, get_renderer
from token_visualizer.tokenizer.protocol import Backend
from token_visualizer.tokenizer.registry import create_backend, validate_models

logger = logging.getLogger(__name__)

T = TypeVar("T")

BackendFactory = Callable[[str, VisualizerConfig], Backend]


class TokenVisualizer:
    """
    Token Visualizer 顶层入口。

    参数:
        config: 配置实例，None 时使用内置默认值
        backend_factory: 自定义后端构造函数 (model_id, config) -> Backend，
            默认走静态注册表（测试中可注入假后端）

    示例::

        visualizer = TokenVisualizer.from_file("token_visualizer.yaml")
        results = visualizer.tokenize("Hello", ["gpt4", "gpt5"])
    """

    def __init__(
        self,
        config: VisualizerConfig | None = None,
        backend_factory: BackendFactory | None = None,
    ) -> None:
        self._config = config or VisualizerConfig()
        self._backend_factory = backend_factory or create_backend

    @classmethod
    def from_file(
        cls,
        path: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> TokenVisualizer:
        """从 YAML 配置文件创建实例。"""
        return cls(config=load_config(path, overrides))

    @property
    def config(self) -> VisualizerConfig:
        return self._config

    # ============================================================
    # 后端解析
    # ============================================================

    def resolve(self, models: Sequence[str]) -> list[tuple[str, Backend]]:
        """
        校验模型标识并构造全部后端。

        异常:
            UnknownModelError: 未知标识（在构造任何后端之前抛出）
            ConfigurationError: 缺少凭证或模型文件
        """
        model_ids = validate_models(models)
        backends = []
        for model_id in model_ids:
            backend = self._backend_factory(model_id, self._config)
            logger.info("已创建后端：%s → %s", model_id, backend.name)
            backends.append((model_id, backend))
        return backends

    # ============================================================
    # 分词与计数
    # ============================================================

    def tokenize(self, text: str, models: Sequence[str]) -> list[TokenizationResult]:
        """对每个模型执行完整分词，结果与 models 顺序一致。"""
        timeout = self._config.execution.timeout
        return self._run(models, lambda backend: backend.encode(text, timeout=timeout))

    def count(self, text: str, models: Sequence[str]) -> list[TokenizationResult]:
        """
        计数视图使用的结果列表。

        与 tokenize 相同走 encode，保证每个结果的 model_label 与可视化视图一致；
        只关心数字时请用 count_tokens。
        """
        return self.tokenize(text, models)

    def count_tokens(self, text: str, models: Sequence[str]) -> list[tuple[str, int]]:
        """
        只取计数：返回 [(模型标识, Token 数)]，按请求顺序排列。

        重复的模型标识各占一项，与渲染出的计数视图逐行对应。
        """
        timeout = self._config.execution.timeout
        model_ids = list(models)
        counts = self._run(model_ids, lambda backend: backend.count_tokens(text, timeout=timeout))
        return list(zip(model_ids, counts))

    # ============================================================
    # 渲染
    # ============================================================

    def renderer(self, fmt: str | None = None) -> Renderer:
        """按配置构造渲染器，fmt 覆盖配置中的格式。"""
        render = self._config.render
        options = RenderOptions(show_ids=render.show_ids, show_boundaries=render.show_boundaries)
        return get_renderer(fmt or render.format, options, width=render.width)

    def visualize(self, text: str, model: str = "gpt4", fmt: str | None = None) -> str:
        """分词并渲染单个模型的结果。"""
        renderer = self.renderer(fmt)
        [result] = self.tokenize(text, [model])
        return renderer.render_single(result)

    def compare(self, text: str, models: Sequence[str], fmt: str | None = None) -> str:
        """分词并渲染多个模型的对比视图。"""
        renderer = self.renderer(fmt)
        return renderer.render_comparison(self.tokenize(text, models))

    def render_counts(self, text: str, models: Sequence[str], fmt: str | None = None) -> str:
        """渲染各模型的 Token 计数。"""
        renderer = self.renderer(fmt)
        return renderer.render_count_only(self.count(text, models))

    # ============================================================
    # 内部方法
    # ============================================================

    def _run(self, models: Sequence[str], call: Callable[[Backend], T]) -> list[T]:
        backends = self.resolve(models)
        try:
            return self._run_parallel([backend for _, backend in backends], call)
        finally:
            for _, backend in backends:
                close = getattr(backend, "close", None)
                if callable(close):
                    close()

    def _run_parallel(self, backends: list[Backend], call: Callable[[Backend], T]) -> list[T]:
        if len(backends) == 1:
            return [call(backends[0])]

        max_workers = min(self._config.execution.max_workers, len(backends))
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tokenize") as pool:
            futures = [pool.submit(call, backend) for backend in backends]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                for future in not_done:
                    future.cancel()
                error = failed[0].exception()
                logger.debug("后端调用失败，中止本次执行：%s", error)
                assert error is not None
                raise error
            return [future.result() for future in futures]
