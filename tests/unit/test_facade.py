"""
TokenVisualizer Facade 单元测试。

使用 conftest 中的假后端工厂，不依赖分词引擎或网络。

覆盖范围:
- facade.py: 后端解析、并发分词、顺序保持、失败中止、渲染
"""

from __future__ import annotations

import json

import pytest

from token_visualizer import TokenVisualizer
from token_visualizer.config import VisualizerConfig
from token_visualizer.errors import TokenizationError, UnknownModelError
from token_visualizer.tokenizer.protocol import Backend

class TestResolve:
    """resolve 测试。"""

    def test_constructs_every_backend(self, fake_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=fake_factory)
        backends = visualizer.resolve(["gpt4", "claude"])
        assert [model_id for model_id, _ in backends] == ["gpt4", "claude"]
        assert all(isinstance(backend, Backend) for _, backend in backends)

    def test_unknown_model_before_any_construction(self, fake_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=fake_factory)
        with pytest.raises(UnknownModelError):
            visualizer.resolve(["gpt4", "nope"])
        assert fake_factory.created == {}


class TestTokenize:
    """tokenize / count 测试。"""

    def test_results_keep_requested_order(self, fake_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=fake_factory)
        results = visualizer.tokenize("Hello big world", ["llama", "gpt5", "gpt4", "claude"])
        assert [r.model_label for r in results] == ["llama", "gpt5", "gpt4", "claude-test"]
        assert results[0].total_count == 5
        assert results[-1].is_count_only
        assert results[-1].total_count == 7

    def test_backends_are_closed(self, fake_factory) -> None:
        TokenVisualizer(backend_factory=fake_factory).tokenize("a b", ["gpt4", "gpt5"])
        assert fake_factory.created["gpt4"].closed
        assert fake_factory.created["gpt5"].closed

    def test_first_failure_aborts(self, failing_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=failing_factory("gpt5"))
        with pytest.raises(TokenizationError, match="gpt5"):
            visualizer.tokenize("Hello", ["gpt4", "gpt5", "llama"])

    def test_single_model_runs_inline(self, fake_factory) -> None:
        [result] = TokenVisualizer(backend_factory=fake_factory).tokenize("a b c", ["gpt4"])
        assert result.total_count == 5

    def test_timeout_is_forwarded(self, fake_factory) -> None:
        config = VisualizerConfig(execution={"timeout": 3.5})
        TokenVisualizer(config, backend_factory=fake_factory).tokenize("a", ["claude"])
        assert fake_factory.created["claude"].timeouts == [3.5]

    def test_count_tokens(self, fake_factory) -> None:
        counts = TokenVisualizer(backend_factory=fake_factory).count_tokens("a b", ["gpt4", "claude"])
        assert counts == [("gpt4", 3), ("claude", 7)]

    def test_count_tokens_keeps_repeated_models(self, fake_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=fake_factory)
        counts = visualizer.count_tokens("a b", ["gpt4", "claude", "gpt4"])
        assert counts == [("gpt4", 3), ("claude", 7), ("gpt4", 3)]
        assert len(visualizer.count("a b", ["gpt4", "claude", "gpt4"])) == len(counts)

    def test_count_agrees_with_tokenize(self, fake_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=fake_factory)
        counted = visualizer.count("one two three", ["gpt4", "claude"])
        tokenized = visualizer.tokenize("one two three", ["gpt4", "claude"])
        assert [r.total_count for r in counted] == [r.total_count for r in tokenized]


class TestRender:
    """visualize / compare / render_counts 测试。"""

    def test_visualize_markdown(self, fake_factory) -> None:
        output = TokenVisualizer(backend_factory=fake_factory).visualize("Hello world", "gpt4", fmt="markdown")
        rows = [line for line in output.splitlines() if line.startswith("|")]
        assert len(rows) == 3 + 2

    def test_format_and_flags_from_config(self, fake_factory) -> None:
        config = VisualizerConfig(render={"format": "html", "show_boundaries": True})
        output = TokenVisualizer(config, backend_factory=fake_factory).visualize("a b", "gpt4")
        assert output.startswith("<!DOCTYPE html>")
        assert output.count('<span class="boundary">|</span>') == 2

    def test_compare_of_one_equals_visualize(self, fake_factory) -> None:
        visualizer = TokenVisualizer(backend_factory=fake_factory)
        assert visualizer.compare("a b", ["gpt4"], fmt="markdown") == visualizer.visualize("a b", "gpt4", fmt="markdown")

    def test_compare(self, fake_factory) -> None:
        output = TokenVisualizer(backend_factory=fake_factory).compare("a b", ["gpt4", "claude"], fmt="markdown")
        assert "| gpt4 | 3 |" in output
        assert "| claude-test | 7 |" in output

    def test_render_counts(self, fake_factory) -> None:
        output = TokenVisualizer(backend_factory=fake_factory).render_counts("a b", ["gpt4", "claude"], fmt="terminal")
        assert "3 tokens" in output
        assert "7 tokens" in output

    def test_from_file(self, tmp_path) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text("render:\n  format: markdown\n", encoding="utf-8")
        visualizer = TokenVisualizer.from_file(path, overrides={"render": {"show_ids": True}})
        assert visualizer.config.render.format == "markdown"
        assert visualizer.config.render.show_ids
        assert json.loads(visualizer.config.model_dump_json())["render"]["show_ids"] is True
