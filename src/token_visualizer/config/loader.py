"""
YAML 配置文件加载与校验。

本模块负责：
1. 从显式路径或默认搜索路径加载 YAML
2. 合并 CLI 传入的覆盖项
3. 使用 Pydantic Schema 校验，并把校验错误精确到字段
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from token_visualizer.config.schema import VisualizerConfig
from token_visualizer.errors import ConfigLoadError, ConfigValidationError

logger = logging.getLogger(__name__)

# 默认配置文件搜索路径
_SEARCH_PATHS = [
    Path("token_visualizer.yaml"),
    Path("token_visualizer.yml"),
    Path(".token_visualizer/config.yaml"),
]


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> VisualizerConfig:
    """
    加载并校验配置。

    加载优先级：
    1. 显式指定的路径
    2. 当前目录下的默认搜索路径
    3. 内置默认值

    参数:
        path: YAML 文件路径。None 时自动搜索默认路径。
        overrides: 运行时覆盖项（深度合并到 YAML 配置之上）

    返回:
        VisualizerConfig 实例

    异常:
        ConfigLoadError: 文件不存在或格式错误
        ConfigValidationError: 配置校验失败
    """
    raw_config: dict[str, Any] = {}
    source = "<default>"

    if path is not None:
        raw_config = _load_yaml_file(Path(path))
        source = str(path)
    else:
        for search_path in _SEARCH_PATHS:
            if search_path.exists():
                logger.info("自动发现配置文件：%s", search_path)
                raw_config = _load_yaml_file(search_path)
                source = str(search_path)
                break
        else:
            logger.debug("未找到配置文件，使用默认配置。")

    if overrides:
        raw_config = _deep_merge(raw_config, overrides)

    return _validate_config(raw_config, source)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """加载并解析 YAML 文件。"""
    if not path.exists():
        raise ConfigLoadError(
            what=f"配置文件 '{path}' 不存在。",
            why=f"在路径 '{path.absolute()}' 下未找到该文件。",
            how="请检查 --config 指定的路径是否正确。",
            file_path=str(path),
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(
            what=f"无法读取配置文件 '{path}'。",
            why=str(e),
            how="请检查文件权限和编码（需要 UTF-8）。",
            file_path=str(path),
        ) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            what=f"配置文件 '{path}' 的 YAML 格式无效。",
            why=str(e),
            how="请使用 YAML 格式校验工具检查文件语法。",
            file_path=str(path),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            what=f"配置文件 '{path}' 的根元素必须是字典（mapping）。",
            why=f"实际类型为 {type(data).__name__}。",
            how="请确保 YAML 文件的根元素是键值对形式，例如：\n"
                "  backend:\n"
                "    encoding: o200k_base",
            file_path=str(path),
        )

    return data


def _validate_config(raw: dict[str, Any], source: str) -> VisualizerConfig:
    """使用 Pydantic 校验配置字典。"""
    try:
        return VisualizerConfig(**raw)
    except ValidationError as e:
        error_details = []
        for err in e.errors():
            field_path = " → ".join(str(loc) for loc in err["loc"])
            error_details.append(f"  字段 '{field_path}': {err['msg']}")

        first_field = ".".join(str(loc) for loc in e.errors()[0]["loc"]) if e.errors() else ""
        raise ConfigValidationError(
            what=f"配置 '{source}' 校验失败（{len(e.errors())} 个错误）。",
            why="\n".join(error_details),
            how="请对照 README 中的配置示例修正对应字段。",
            config_path=source,
            field_path=first_field,
        ) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """深度合并两个字典，override 中的值优先。"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
