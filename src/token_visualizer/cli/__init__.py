"""
Token Visualizer CLI — 命令行工具。

提供完整的子命令：
- visualize: 单模型着色输出
- count: 只输出 Token 计数
- compare: 多模型对比
- models: 列出支持的模型
- cache-clear: 清空远程计数缓存
- version: 显示版本
"""

from token_visualizer.cli.app import app, main

__all__ = ["app", "main"]
